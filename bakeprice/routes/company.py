from flask import Blueprint, jsonify, current_app

from ..models import db, SalesChannel
from ..pricing import OVERHEAD_METHODS
from .utils import (
    log_audit, current_company, require_admin, get_json_body, parse_number,
    parse_string, parse_choice, parse_boolean, parse_list
)

company_blueprint = Blueprint('company', __name__)

# ----------------------------
# Company Settings
# ----------------------------
@company_blueprint.route('/company/settings', methods=['GET'])
def get_settings():
    settings = current_company().settings_dict()
    settings['currency_symbol'] = current_app.config['CURRENCY_SYMBOL']
    return jsonify(settings)

@company_blueprint.route('/company/settings', methods=['PUT'])
def update_settings():
    require_admin()
    data = get_json_body()
    company = current_company()

    company.overhead_method = parse_choice(data, 'overhead_method', OVERHEAD_METHODS)
    company.overhead_percent = parse_number(data, 'overhead_percent', minimum=0)
    company.overhead_per_unit = parse_number(data, 'overhead_per_unit', minimum=0)
    company.labor_cost_per_hour = parse_number(data, 'labor_cost_per_hour', minimum=0)
    company.fixed_cost_per_hour = parse_number(data, 'fixed_cost_per_hour', minimum=0)
    company.taxes_percent = parse_number(data, 'taxes_percent', minimum=0)
    company.default_profit_percent = parse_number(data, 'default_profit_percent', minimum=0)

    # Channels are replaced as a whole; ids sent back are kept so products stay linked
    existing = {c.id: c for c in company.sales_channels}
    channels = []
    for position, item in enumerate(parse_list(data, 'sales_channels')):
        channel_id = parse_string(item, 'id', required=False)
        channel = existing.get(channel_id) or SalesChannel(company_id=company.id)
        channel.name = parse_string(item, 'name', min_length=2)
        channel.fee_percent = parse_number(item, 'fee_percent', minimum=0)
        channel.payment_fee_percent = parse_number(item, 'payment_fee_percent', minimum=0)
        channel.fee_fixed = parse_number(item, 'fee_fixed', minimum=0)
        channel.active = parse_boolean(item, 'active', default=True)
        channel.position = position
        channels.append(channel)
    company.sales_channels = channels

    log_audit("UPDATE", "CompanySettings", company.id, f"Updated settings with {len(channels)} sales channels")
    db.session.commit()
    return jsonify(company.settings_dict())
