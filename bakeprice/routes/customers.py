from flask import Blueprint, jsonify
from flask_babel import gettext as _

from ..errors import ValidationError
from ..models import db, Customer
from .utils import log_audit, current_company_id, get_scoped_or_404, get_json_body, parse_string, parse_choice

customers_blueprint = Blueprint('customers', __name__)

PERSON_TYPES = ('PF', 'PJ')


def _apply_customer_fields(customer, data):
    customer.name = parse_string(data, 'name', min_length=2)
    customer.phone = parse_string(data, 'phone', min_length=8)
    customer.person_type = parse_choice(data, 'person_type', PERSON_TYPES, default='PF')
    customer.email = parse_string(data, 'email', required=False)
    if customer.email and '@' not in customer.email:
        raise ValidationError(_('email is not a valid address'))
    for field in ('address', 'number', 'city', 'neighborhood', 'zip_code', 'notes'):
        setattr(customer, field, parse_string(data, field, required=False))

# ----------------------------
# Customers Management
# ----------------------------
@customers_blueprint.route('/customers', methods=['GET'])
def list_customers():
    customers = Customer.query.filter_by(company_id=current_company_id()) \
        .order_by(Customer.created_at.desc()).all()
    return jsonify([c.to_dict() for c in customers])

@customers_blueprint.route('/customers', methods=['POST'])
def add_customer():
    customer = Customer(company_id=current_company_id())
    _apply_customer_fields(customer, get_json_body())

    db.session.add(customer)
    db.session.flush()
    log_audit("CREATE", "Customer", customer.id, f"Created customer {customer.name}")
    db.session.commit()
    return jsonify(customer.to_dict()), 201

@customers_blueprint.route('/customers/<string:customer_id>', methods=['PUT'])
def edit_customer(customer_id):
    customer = get_scoped_or_404(Customer, customer_id, _('Customer not found'))
    _apply_customer_fields(customer, get_json_body())

    log_audit("UPDATE", "Customer", customer.id, f"Updated customer {customer.name}")
    db.session.commit()
    return jsonify(customer.to_dict())

@customers_blueprint.route('/customers/<string:customer_id>', methods=['DELETE'])
def delete_customer(customer_id):
    customer = get_scoped_or_404(Customer, customer_id, _('Customer not found'))
    # Orders keep their customer snapshot
    for order in customer.orders:
        order.customer_id = None
    db.session.delete(customer)
    log_audit("DELETE", "Customer", customer_id, f"Deleted customer {customer.name}")
    db.session.commit()
    return '', 204
