from datetime import datetime, timezone
from flask import Blueprint, jsonify, request
from flask_babel import gettext as _

from ..errors import ValidationError
from ..models import db, Customer, Order
from ..pricing.orders import FIXED, PERCENT
from .utils import (
    log_audit, current_company_id, get_scoped_or_404, get_json_body, parse_number,
    parse_string, parse_choice, parse_boolean, parse_list
)

orders_blueprint = Blueprint('orders', __name__)

ORDER_TYPES = ('PEDIDO', 'ORCAMENTO')
DELIVERY_TYPES = ('ENTREGA', 'RETIRADA')
ORDER_STATUSES = ('AGUARDANDO_RETORNO', 'CONFIRMADO', 'CONCLUIDO', 'CANCELADO')
ADJUSTMENT_MODES = (PERCENT, FIXED)
SNAPSHOT_FIELDS = ('email', 'address', 'number', 'city', 'neighborhood', 'zip_code')


def parse_datetime(value, field):
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if not isinstance(value, str) or not value:
        raise ValidationError(_('%(field)s must be an ISO date', field=field))
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(_('%(field)s must be an ISO date', field=field))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_customer_snapshot(data):
    snapshot = data.get('customer_snapshot')
    if snapshot is None:
        return None
    if not isinstance(snapshot, dict):
        raise ValidationError(_('customer_snapshot must be an object'))
    parsed = {
        'name': parse_string(snapshot, 'name'),
        'phone': parse_string(snapshot, 'phone', min_length=8),
        'person_type': parse_choice(snapshot, 'person_type', ('PF', 'PJ'), default='PF')
    }
    for field in SNAPSHOT_FIELDS:
        parsed[field] = parse_string(snapshot, field, required=False)
    return parsed


def _apply_order_fields(order, data):
    order.type = parse_choice(data, 'type', ORDER_TYPES)
    order.order_datetime = parse_datetime(data.get('order_datetime'), 'order_datetime')

    customer_id = parse_string(data, 'customer_id', required=False)
    if customer_id:
        get_scoped_or_404(Customer, customer_id, _('Customer not found'))
    order.customer_id = customer_id
    order.customer_snapshot = _parse_customer_snapshot(data)

    order.delivery_type = parse_choice(data, 'delivery_type', DELIVERY_TYPES)
    order.delivery_date = parse_string(data, 'delivery_date', required=False)
    order.status = parse_choice(data, 'status', ORDER_STATUSES)

    order.products = [
        {
            'product_id': parse_string(item, 'product_id'),
            'name': parse_string(item, 'name'),
            'unit_price': parse_number(item, 'unit_price', minimum=0),
            'quantity': parse_number(item, 'quantity', positive=True),
            'notes': parse_string(item, 'notes', required=False)
        }
        for item in parse_list(data, 'products')
    ]
    order.additions = [
        {
            'label': parse_string(item, 'label'),
            'mode': parse_choice(item, 'mode', ADJUSTMENT_MODES),
            'value': parse_number(item, 'value', minimum=0)
        }
        for item in parse_list(data, 'additions')
    ]
    order.discount_mode = parse_choice(data, 'discount_mode', ADJUSTMENT_MODES, default=FIXED)
    order.discount_value = parse_number(data, 'discount_value', default=0.0, minimum=0)
    order.shipping_value = parse_number(data, 'shipping_value', default=0.0, minimum=0)

    for field in ('notes_delivery', 'notes_general', 'notes_payment', 'pix', 'terms'):
        setattr(order, field, parse_string(data, field, required=False))

    order.payments = [
        {
            'date': parse_string(item, 'date'),
            'amount': parse_number(item, 'amount', positive=True),
            'note': parse_string(item, 'note', required=False)
        }
        for item in parse_list(data, 'payments')
    ]
    order.alerts = [
        {'label': parse_string(item, 'label'), 'enabled': parse_boolean(item, 'enabled', default=False)}
        for item in parse_list(data, 'alerts')
    ]

# ----------------------------
# Orders and Quotes
# ----------------------------
@orders_blueprint.route('/orders', methods=['GET'])
def list_orders():
    orders = Order.query.filter_by(company_id=current_company_id()) \
        .order_by(Order.created_at.desc()).all()
    if request.args.get('view') == 'list':
        return jsonify([o.to_list_dict() for o in orders])
    return jsonify([o.to_dict() for o in orders])

@orders_blueprint.route('/orders/summary', methods=['GET'])
def orders_summary():
    """Orders between ``from`` and ``to`` (inclusive) with their totals."""
    query = Order.query.filter_by(company_id=current_company_id())
    if request.args.get('from'):
        query = query.filter(Order.order_datetime >= parse_datetime(request.args['from'], 'from'))
    if request.args.get('to'):
        query = query.filter(Order.order_datetime <= parse_datetime(request.args['to'], 'to'))
    orders = query.order_by(Order.order_datetime).all()
    return jsonify([o.to_summary_dict() for o in orders])

@orders_blueprint.route('/orders/<string:order_id>', methods=['GET'])
def get_order(order_id):
    order = get_scoped_or_404(Order, order_id, _('Order not found'))
    return jsonify(order.to_dict())

@orders_blueprint.route('/orders', methods=['POST'])
def add_order():
    order = Order(company_id=current_company_id())
    _apply_order_fields(order, get_json_body())

    db.session.add(order)
    db.session.flush()
    log_audit("CREATE", "Order", order.id, f"Created {order.type} with total {order.total}")
    db.session.commit()
    return jsonify(order.to_dict()), 201

@orders_blueprint.route('/orders/<string:order_id>', methods=['PUT'])
def edit_order(order_id):
    order = get_scoped_or_404(Order, order_id, _('Order not found'))
    _apply_order_fields(order, get_json_body())

    log_audit("UPDATE", "Order", order.id, f"Updated {order.type} to status {order.status}")
    db.session.commit()
    return jsonify(order.to_dict())
