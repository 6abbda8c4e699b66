from flask import Blueprint, jsonify
from flask_babel import gettext as _

from ..models import db, Input
from ..pricing import UNITS
from .utils import (
    log_audit, current_company_id, get_scoped_or_404, get_json_body,
    parse_number, parse_string, parse_choice
)

inputs_blueprint = Blueprint('inputs', __name__)

INPUT_CATEGORIES = ('producao', 'embalagem', 'outros')


def _apply_input_fields(input_item, data):
    input_item.name = parse_string(data, 'name', min_length=2)
    input_item.brand = parse_string(data, 'brand', required=False)
    input_item.category = parse_choice(data, 'category', INPUT_CATEGORIES)
    input_item.unit = parse_choice(data, 'unit', UNITS)
    input_item.package_size = parse_number(data, 'package_size', positive=True)
    input_item.package_price = parse_number(data, 'package_price', positive=True)
    input_item.notes = parse_string(data, 'notes', required=False)

# ----------------------------
# Inputs Management
# ----------------------------
@inputs_blueprint.route('/inputs', methods=['GET'])
def list_inputs():
    inputs = Input.query.filter_by(company_id=current_company_id()).order_by(Input.name).all()
    return jsonify([i.to_dict() for i in inputs])

@inputs_blueprint.route('/inputs', methods=['POST'])
def add_input():
    data = get_json_body()
    input_item = Input(company_id=current_company_id())
    _apply_input_fields(input_item, data)

    db.session.add(input_item)
    db.session.flush()
    log_audit("CREATE", "Input", input_item.id, f"Created input {input_item.name}")
    db.session.commit()
    return jsonify(input_item.to_dict()), 201

@inputs_blueprint.route('/inputs/<string:input_id>', methods=['PUT'])
def edit_input(input_id):
    input_item = get_scoped_or_404(Input, input_id, _('Input not found'))
    _apply_input_fields(input_item, get_json_body())

    log_audit("UPDATE", "Input", input_item.id, f"Updated input {input_item.name}")
    db.session.commit()
    return jsonify(input_item.to_dict())

@inputs_blueprint.route('/inputs/<string:input_id>', methods=['DELETE'])
def delete_input(input_id):
    input_item = get_scoped_or_404(Input, input_id, _('Input not found'))
    # Recipe and product lines pointing here are kept; they cost 0 from now on
    db.session.delete(input_item)
    log_audit("DELETE", "Input", input_id, f"Deleted input {input_item.name}")
    db.session.commit()
    return '', 204
