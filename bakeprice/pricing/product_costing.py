import logging
from dataclasses import asdict, dataclass, replace

from .catalog import Catalog
from .costing import calculate_input_line_cost, calculate_recipe_direct_cost
from .pricing import calculate_overhead_cost, channel_terms, price_denominator, round_money

logger = logging.getLogger(__name__)


@dataclass
class ProductPricePreview:
    direct_cost: float
    overhead_cost: float
    variable_percent: float
    fee_fixed: float
    units_count: float
    unit_price: float
    total_price: float
    profit_value: float
    profit_percent: float

    def to_dict(self):
        return asdict(self)


def calculate_product_direct_cost(product, catalog, units):
    """
    Sum of the base recipe (per yield unit, times ``units``), extra recipes,
    extra products at their cached price and packaging inputs.
    """
    base_cost = 0.0
    base_recipe = catalog.get_recipe(product.recipe_id) if product.recipe_id else None
    if base_recipe:
        base_total = calculate_recipe_direct_cost(base_recipe, catalog)
        if base_recipe.yield_quantity > 0:
            base_cost = base_total / base_recipe.yield_quantity * units
        else:
            base_cost = base_total * units

    recipes_cost = 0.0
    for line in product.extra_recipes:
        recipe = catalog.get_recipe(line.recipe_id)
        if not recipe or recipe.yield_quantity <= 0:
            continue
        total = calculate_recipe_direct_cost(recipe, catalog)
        recipes_cost += total / recipe.yield_quantity * line.quantity

    # Referenced products are not recomputed: their last stored price is used
    products_cost = 0.0
    for line in product.extra_products:
        other = catalog.get_product(line.product_id)
        if not other:
            continue
        products_cost += other.cached_unit_cost * line.quantity

    packaging_cost = 0.0
    for line in product.packaging_inputs:
        cost_input = catalog.get_input(line.input_id)
        if not cost_input:
            continue
        packaging_cost += calculate_input_line_cost(cost_input, line.quantity, line.unit)

    return base_cost + recipes_cost + products_cost + packaging_cost


def calculate_product_preview(product, catalog, settings, channel=None):
    """
    Price a product batch of ``units_count`` units for one sales channel.

    The markup (target profit plus extra percent) multiplies the base cost and
    taxes and channel fees are grossed up through the shared denominator.
    """
    fee_percent, payment_fee_percent, fee_fixed = channel_terms(channel)
    safe_units = product.units_count if product.units_count > 0 else 1

    direct_cost = calculate_product_direct_cost(product, catalog, safe_units)
    overhead_cost = calculate_overhead_cost(
        settings, direct_cost, product.prep_time_minutes, units=safe_units
    )

    deductions_percent = settings.taxes_percent + fee_percent + payment_fee_percent
    denominator = price_denominator(deductions_percent)
    base_cost = direct_cost + overhead_cost + fee_fixed
    markup_multiplier = 1 + (product.target_profit_percent + product.extra_percent) / 100

    total_price = base_cost * markup_multiplier / denominator
    unit_price = total_price / safe_units
    profit_value = total_price - base_cost - total_price * deductions_percent / 100
    profit_percent = profit_value / total_price * 100 if total_price > 0 else 0.0

    return ProductPricePreview(
        direct_cost=round_money(direct_cost),
        overhead_cost=round_money(overhead_cost),
        variable_percent=round_money(
            deductions_percent + product.target_profit_percent + product.extra_percent
        ),
        fee_fixed=round_money(fee_fixed),
        units_count=round_money(safe_units),
        unit_price=round_money(unit_price),
        total_price=round_money(total_price),
        profit_value=round_money(profit_value),
        profit_percent=round_money(profit_percent),
    )


def reprice_products(catalog, settings):
    """
    Recompute the cached prices of every product in the catalog.

    Products used as extras are priced before the products that include them,
    so a refreshed price propagates up the bundle chain in one pass. A product
    met again while its own price is still being resolved (a cyclic bundle)
    keeps its previously cached price.

    Returns {product_id: ProductPricePreview}; the catalog is left untouched.
    """
    working = {product_id: replace(product) for product_id, product in catalog.products.items()}
    snapshot = Catalog(inputs=catalog.inputs, recipes=catalog.recipes, products=working)

    previews = {}
    visiting = set()

    def reprice(product_id):
        if product_id in previews:
            return
        if product_id in visiting:
            logger.warning("Product %s is part of a bundle cycle, using its cached price", product_id)
            return
        visiting.add(product_id)

        product = working[product_id]
        for line in product.extra_products:
            if line.product_id in working:
                reprice(line.product_id)

        channel = settings.resolve_channel(product.channel_id)
        preview = calculate_product_preview(product, snapshot, settings, channel)
        product.unit_price = preview.unit_price
        product.sale_price = preview.total_price
        previews[product_id] = preview
        visiting.discard(product_id)

    for product_id in working:
        reprice(product_id)

    return previews
