from .catalog import (
    OVERHEAD_METHODS, PER_UNIT, PERCENT_DIRECT, Catalog, CostInput, CostRecipe,
    ExtraProductLine, ExtraRecipeLine, IngredientLine, PackagingLine,
    PricingSettings, ProductDefinition, SalesChannelTerms, SubRecipeLine,
)
from .costing import calculate_input_line_cost, calculate_recipe_direct_cost, calculate_recipe_unit_cost
from .orders import calculate_amount_paid, calculate_order_total
from .pricing import (
    PricePreview, ProfitBreakdown, calculate_overhead_cost, calculate_price_preview,
    calculate_profit_from_price, price_denominator, round_money,
)
from .product_costing import ProductPricePreview, calculate_product_preview, reprice_products
from .units import UNITS, normalize_quantity
