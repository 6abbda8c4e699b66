import logging
from flask import Blueprint, jsonify
from flask_babel import gettext as _

from ..models import Recipe
from ..pricing import calculate_price_preview, calculate_profit_from_price
from .utils import current_company, get_scoped_or_404, load_catalog, get_json_body, parse_number, parse_string

logger = logging.getLogger(__name__)

pricing_blueprint = Blueprint('pricing', __name__)


def _pricing_context(data):
    """Load the recipe, company settings, channel and catalog a pricing call needs."""
    recipe_id = parse_string(data, 'recipe_id')
    channel_id = parse_string(data, 'channel_id', required=False)

    recipe = get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))
    company = current_company()
    settings = company.to_pricing_settings()
    catalog = load_catalog(company.id)
    return catalog.get_recipe(recipe.id), catalog, settings, settings.resolve_channel(channel_id)

# ----------------------------
# Recipe Pricing
# ----------------------------
@pricing_blueprint.route('/pricing/preview', methods=['POST'])
def price_preview():
    """Suggested sale price for a target profit percentage."""
    data = get_json_body()
    recipe, catalog, settings, channel = _pricing_context(data)
    target_profit_percent = parse_number(
        data, 'target_profit_percent', default=settings.default_profit_percent, minimum=0
    )

    preview = calculate_price_preview(recipe, catalog, settings, target_profit_percent, channel)
    logger.debug("Priced recipe %s at %s for %s%% profit", recipe.id, preview.suggested_price, target_profit_percent)
    return jsonify(preview.to_dict())

@pricing_blueprint.route('/pricing/profit', methods=['POST'])
def profit_from_price():
    """Realized profit for a given sale price."""
    data = get_json_body()
    sale_price = parse_number(data, 'sale_price', minimum=0)
    recipe, catalog, settings, channel = _pricing_context(data)

    result = calculate_profit_from_price(recipe, catalog, settings, sale_price, channel)
    return jsonify(result.to_dict())
