import json
import io
from datetime import datetime
from flask import Blueprint, send_file, jsonify, request

from ..models import db, AuditLog, Customer, Input, Order, Product, Recipe
from .utils import log_audit, current_company, require_admin

admin_blueprint = Blueprint('admin', __name__)

MAX_AUDIT_ENTRIES = 500

@admin_blueprint.route('/admin/backup', methods=['GET'])
def backup_company():
    """Export every catalog and order record of the caller's company as JSON"""
    require_admin()
    company = current_company()

    collections = {
        'inputs': Input.query.filter_by(company_id=company.id).all(),
        'recipes': Recipe.query.filter_by(company_id=company.id).all(),
        'products': Product.query.filter_by(company_id=company.id).all(),
        'customers': Customer.query.filter_by(company_id=company.id).all(),
        'orders': Order.query.filter_by(company_id=company.id).all(),
    }
    total_records = sum(len(rows) for rows in collections.values())

    data = {
        'version': '1.0',
        'timestamp': datetime.now().isoformat(),
        'company': company.to_dict(),

        # Leaves first so a restore can insert in order
        'inputs': [i.to_dict() for i in collections['inputs']],
        'recipes': [r.to_dict() for r in collections['recipes']],
        'products': [p.to_dict() for p in collections['products']],
        'customers': [c.to_dict() for c in collections['customers']],
        'orders': [o.to_dict() for o in collections['orders']],

        'statistics': {
            'total_records': total_records,
            'model_counts': {name: len(rows) for name, rows in collections.items()}
        }
    }

    json_str = json.dumps(data, indent=4, ensure_ascii=False)
    mem = io.BytesIO()
    mem.write(json_str.encode('utf-8'))
    mem.seek(0)

    filename = f"bakeprice_backup_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    log_audit("BACKUP", "Company", company.id, f"Backup created with {total_records} records")
    db.session.commit()

    return send_file(
        mem,
        as_attachment=True,
        download_name=filename,
        mimetype='application/json'
    )

@admin_blueprint.route('/audit_log')
def audit_log():
    require_admin()
    company = current_company()
    limit = request.args.get('limit', 100, type=int)
    limit = max(1, min(limit, MAX_AUDIT_ENTRIES))
    logs = AuditLog.query.filter_by(company_id=company.id) \
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([log.to_dict() for log in logs])
