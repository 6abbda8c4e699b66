from datetime import datetime
from flask import Blueprint, jsonify
from flask_babel import gettext as _
from sqlalchemy.orm import selectinload

from ..models import db, Product, ProductComponent, Recipe
from ..pricing import (
    ExtraProductLine, ExtraRecipeLine, PackagingLine, ProductDefinition,
    calculate_product_preview, reprice_products
)
from .utils import (
    log_audit, current_company, get_scoped_or_404, load_catalog, get_json_body,
    parse_number, parse_string, parse_component_lines
)

products_blueprint = Blueprint('products', __name__)


def _parse_product(data, company, product_id=None):
    """Validate a product payload and turn it into an engine definition."""
    recipe_id = parse_string(data, 'recipe_id', required=False)
    if recipe_id:
        get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))

    return ProductDefinition(
        id=product_id,
        name=parse_string(data, 'name', min_length=2),
        recipe_id=recipe_id,
        units_count=parse_number(data, 'units_count', positive=True),
        prep_time_minutes=parse_number(data, 'prep_time_minutes', default=0.0, minimum=0),
        target_profit_percent=parse_number(
            data, 'target_profit_percent', default=company.default_profit_percent, minimum=0
        ),
        extra_percent=parse_number(data, 'extra_percent', default=0.0, minimum=0),
        channel_id=parse_string(data, 'channel_id', required=False),
        extra_recipes=[
            ExtraRecipeLine(line['recipe_id'], line['quantity'])
            for line in parse_component_lines(data, 'extra_recipes', 'recipe_id')
        ],
        extra_products=[
            ExtraProductLine(line['product_id'], line['quantity'])
            for line in parse_component_lines(data, 'extra_products', 'product_id')
        ],
        packaging_inputs=[
            PackagingLine(line['input_id'], line['quantity'], line['unit'])
            for line in parse_component_lines(data, 'packaging_inputs', 'input_id', with_unit=True)
        ]
    )


def _price_product(definition, company):
    settings = company.to_pricing_settings()
    channel = settings.resolve_channel(definition.channel_id)
    preview = calculate_product_preview(definition, load_catalog(company.id), settings, channel)
    return preview, channel


def _store_product(product, definition, preview, channel, notes):
    product.name = definition.name
    product.recipe_id = definition.recipe_id
    product.units_count = definition.units_count
    product.prep_time_minutes = definition.prep_time_minutes
    product.target_profit_percent = definition.target_profit_percent
    product.extra_percent = definition.extra_percent
    product.channel_id = channel.id if channel else None
    product.notes = notes
    product.unit_price = preview.unit_price
    product.sale_price = preview.total_price
    product.priced_at = datetime.utcnow()

    components = []
    for line in definition.extra_recipes:
        components.append(ProductComponent(component_type='recipe', component_id=line.recipe_id,
                                           quantity=line.quantity, position=len(components)))
    for line in definition.extra_products:
        components.append(ProductComponent(component_type='product', component_id=line.product_id,
                                           quantity=line.quantity, position=len(components)))
    for line in definition.packaging_inputs:
        components.append(ProductComponent(component_type='packaging', component_id=line.input_id,
                                           quantity=line.quantity, unit=line.unit, position=len(components)))
    product.components = components

# ----------------------------
# Products Management
# ----------------------------
@products_blueprint.route('/products', methods=['GET'])
def list_products():
    company = current_company()
    products = Product.query.filter_by(company_id=company.id) \
        .options(selectinload(Product.components)).order_by(Product.name).all()
    return jsonify([p.to_dict() for p in products])

@products_blueprint.route('/products/<string:product_id>', methods=['GET'])
def get_product(product_id):
    product = get_scoped_or_404(Product, product_id, _('Product not found'))
    return jsonify(product.to_dict())

@products_blueprint.route('/products/preview', methods=['POST'])
def preview_product():
    """Price a product payload without saving it."""
    company = current_company()
    definition = _parse_product(get_json_body(), company)
    preview, _channel = _price_product(definition, company)
    return jsonify(preview.to_dict())

@products_blueprint.route('/products', methods=['POST'])
def add_product():
    company = current_company()
    data = get_json_body()
    definition = _parse_product(data, company)
    preview, channel = _price_product(definition, company)

    product = Product(company_id=company.id)
    _store_product(product, definition, preview, channel, parse_string(data, 'notes', required=False))
    db.session.add(product)
    db.session.flush()

    log_audit("CREATE", "Product", product.id,
              f"Created product {product.name} priced at {product.unit_price} per unit")
    db.session.commit()
    return jsonify({'product': product.to_dict(), 'preview': preview.to_dict()}), 201

@products_blueprint.route('/products/<string:product_id>', methods=['PUT'])
def edit_product(product_id):
    product = get_scoped_or_404(Product, product_id, _('Product not found'))
    company = current_company()
    data = get_json_body()
    definition = _parse_product(data, company, product_id=product.id)
    preview, channel = _price_product(definition, company)

    _store_product(product, definition, preview, channel, parse_string(data, 'notes', required=False))
    log_audit("UPDATE", "Product", product.id,
              f"Updated product {product.name} priced at {product.unit_price} per unit")
    db.session.commit()
    return jsonify({'product': product.to_dict(), 'preview': preview.to_dict()})

@products_blueprint.route('/products/<string:product_id>', methods=['DELETE'])
def delete_product(product_id):
    product = get_scoped_or_404(Product, product_id, _('Product not found'))
    db.session.delete(product)
    log_audit("DELETE", "Product", product_id, f"Deleted product {product.name}")
    db.session.commit()
    return '', 204

@products_blueprint.route('/products/reprice', methods=['POST'])
def reprice_all_products():
    """Refresh every stored product price after input or recipe changes."""
    company = current_company()
    previews = reprice_products(load_catalog(company.id), company.to_pricing_settings())

    now = datetime.utcnow()
    products = Product.query.filter_by(company_id=company.id).options(selectinload(Product.components)).all()
    for product in products:
        preview = previews.get(product.id)
        if not preview:
            continue
        product.unit_price = preview.unit_price
        product.sale_price = preview.total_price
        product.priced_at = now

    log_audit("REPRICE", "Product", details=f"Repriced {len(previews)} products")
    db.session.commit()
    return jsonify({
        'products': [
            {'product': p.to_dict(), 'preview': previews[p.id].to_dict()}
            for p in products if p.id in previews
        ]
    })
