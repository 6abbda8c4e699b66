"""
Read-only catalog types consumed by the pricing engine.

The engine works on these plain records instead of ORM rows so it can run
over a snapshot loaded from the database or over fixtures built by hand.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

PERCENT_DIRECT = 'PERCENT_DIRECT'
PER_UNIT = 'PER_UNIT'
OVERHEAD_METHODS = (PERCENT_DIRECT, PER_UNIT)


@dataclass(frozen=True)
class IngredientLine:
    input_id: str
    quantity: float
    unit: str


@dataclass(frozen=True)
class SubRecipeLine:
    recipe_id: str
    quantity: float


@dataclass(frozen=True)
class ExtraRecipeLine:
    recipe_id: str
    quantity: float


@dataclass(frozen=True)
class ExtraProductLine:
    product_id: str
    quantity: float


@dataclass(frozen=True)
class PackagingLine:
    input_id: str
    quantity: float
    unit: str


@dataclass
class CostInput:
    """A purchasable raw material or packaging item."""

    id: str
    name: str
    unit: str
    package_size: float
    package_price: float
    category: str = 'producao'

    @property
    def unit_cost(self) -> float:
        return self.package_price / self.package_size


@dataclass
class CostRecipe:
    """
    A produced good. ``yield_quantity`` is what one batch makes, in
    ``yield_unit``; sub-recipe lines consume the sub-recipe's own yield unit.
    """

    id: str
    name: str
    yield_quantity: float
    yield_unit: str = 'un'
    prep_time_minutes: float = 0.0
    ingredients: List[IngredientLine] = field(default_factory=list)
    sub_recipes: List[SubRecipeLine] = field(default_factory=list)


@dataclass
class ProductDefinition:
    """A sellable bundle plus its last computed (cached) prices."""

    id: Optional[str]
    name: str
    recipe_id: Optional[str] = None
    units_count: float = 1.0
    prep_time_minutes: float = 0.0
    target_profit_percent: float = 0.0
    extra_percent: float = 0.0
    channel_id: Optional[str] = None
    extra_recipes: List[ExtraRecipeLine] = field(default_factory=list)
    extra_products: List[ExtraProductLine] = field(default_factory=list)
    packaging_inputs: List[PackagingLine] = field(default_factory=list)
    unit_price: float = 0.0
    sale_price: float = 0.0

    @property
    def cached_unit_cost(self) -> float:
        return self.unit_price if self.unit_price > 0 else self.sale_price


@dataclass
class SalesChannelTerms:
    id: str
    name: str
    fee_percent: float = 0.0
    payment_fee_percent: float = 0.0
    fee_fixed: float = 0.0
    active: bool = True


@dataclass
class PricingSettings:
    overhead_method: str = PERCENT_DIRECT
    overhead_percent: float = 0.0
    overhead_per_unit: float = 0.0
    labor_cost_per_hour: float = 0.0
    fixed_cost_per_hour: float = 0.0
    taxes_percent: float = 0.0
    default_profit_percent: float = 0.0
    sales_channels: List[SalesChannelTerms] = field(default_factory=list)

    def resolve_channel(self, channel_id=None) -> Optional[SalesChannelTerms]:
        """The requested channel, else the first one, else None (no fees)."""
        if channel_id:
            for channel in self.sales_channels:
                if channel.id == channel_id:
                    return channel
        return self.sales_channels[0] if self.sales_channels else None


@dataclass
class Catalog:
    """Arena of one company's inputs, recipes and products keyed by id."""

    inputs: Dict[str, CostInput] = field(default_factory=dict)
    recipes: Dict[str, CostRecipe] = field(default_factory=dict)
    products: Dict[str, ProductDefinition] = field(default_factory=dict)

    @classmethod
    def build(cls, inputs: Iterable[CostInput] = (), recipes: Iterable[CostRecipe] = (),
              products: Iterable[ProductDefinition] = ()) -> 'Catalog':
        return cls(
            inputs={item.id: item for item in inputs},
            recipes={recipe.id: recipe for recipe in recipes},
            products={product.id: product for product in products},
        )

    def get_input(self, input_id) -> Optional[CostInput]:
        return self.inputs.get(input_id)

    def get_recipe(self, recipe_id) -> Optional[CostRecipe]:
        return self.recipes.get(recipe_id)

    def get_product(self, product_id) -> Optional[ProductDefinition]:
        return self.products.get(product_id)
