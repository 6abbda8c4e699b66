"""
Forward pricing (cost -> suggested price) and reverse pricing
(sale price -> realized profit) for a single recipe.
"""
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from ..errors import DomainInvalidError
from .catalog import PERCENT_DIRECT
from .costing import calculate_recipe_direct_cost

# Smallest share of the price left after percentage deductions
MIN_PRICE_DENOMINATOR = 0.001

CENT = Decimal('0.01')

# Enough digits to hold any finite float down to the cent
MONEY_PRECISION = 400


def round_money(value):
    """Round to cents, halves away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))


@dataclass
class PricePreview:
    direct_cost: float
    overhead_cost: float
    variable_percent: float
    fee_fixed: float
    suggested_price: float
    profit_value: float
    profit_percent: float

    def to_dict(self):
        return asdict(self)


@dataclass
class ProfitBreakdown:
    direct_cost: float
    overhead_cost: float
    variable_percent: float
    fee_fixed: float
    sale_price: float
    profit_value: float
    profit_percent: float

    def to_dict(self):
        return asdict(self)


def channel_terms(channel):
    """Return (fee_percent, payment_fee_percent, fee_fixed); no channel means no fees."""
    if channel is None:
        return 0.0, 0.0, 0.0
    return channel.fee_percent, channel.payment_fee_percent, channel.fee_fixed


def calculate_overhead_cost(settings, direct_cost, prep_time_minutes, units=None):
    """
    Overhead allocation plus labor and fixed cost for the preparation time.

    With the per-unit method the flat amount is multiplied by ``units`` when
    given (products); recipes pass no units and get the flat amount once.
    """
    if settings.overhead_method == PERCENT_DIRECT:
        base_overhead = direct_cost * settings.overhead_percent / 100
    else:
        base_overhead = settings.overhead_per_unit
        if units is not None:
            base_overhead *= units

    hours = (prep_time_minutes or 0) / 60
    labor_cost = settings.labor_cost_per_hour * hours
    fixed_cost = settings.fixed_cost_per_hour * hours
    return base_overhead + labor_cost + fixed_cost


def price_denominator(variable_percent):
    """
    Share of the sale price left once ``variable_percent`` is deducted.

    Raises DomainInvalidError at 100% or more, where no finite positive price
    exists; otherwise floors the share at MIN_PRICE_DENOMINATOR.
    """
    if variable_percent >= 100:
        raise DomainInvalidError(
            f"Percentages add up to {round_money(variable_percent)}%, a sale price needs less than 100%"
        )
    return max(1 - variable_percent / 100, MIN_PRICE_DENOMINATOR)


def calculate_price_preview(recipe, catalog, settings, target_profit_percent, channel=None):
    fee_percent, payment_fee_percent, fee_fixed = channel_terms(channel)

    direct_cost = calculate_recipe_direct_cost(recipe, catalog)
    overhead_cost = calculate_overhead_cost(settings, direct_cost, recipe.prep_time_minutes)

    deductions_percent = settings.taxes_percent + fee_percent + payment_fee_percent
    variable_percent = deductions_percent + target_profit_percent
    base_cost = direct_cost + overhead_cost + fee_fixed

    suggested_price = base_cost / price_denominator(variable_percent)
    # The target profit is embedded in the price, so only taxes and fees are deducted
    profit_value = suggested_price - base_cost - suggested_price * deductions_percent / 100

    return PricePreview(
        direct_cost=round_money(direct_cost),
        overhead_cost=round_money(overhead_cost),
        variable_percent=round_money(variable_percent),
        fee_fixed=round_money(fee_fixed),
        suggested_price=round_money(suggested_price),
        profit_value=round_money(profit_value),
        profit_percent=round_money(target_profit_percent),
    )


def calculate_profit_from_price(recipe, catalog, settings, sale_price, channel=None):
    fee_percent, payment_fee_percent, fee_fixed = channel_terms(channel)

    direct_cost = calculate_recipe_direct_cost(recipe, catalog)
    overhead_cost = calculate_overhead_cost(settings, direct_cost, recipe.prep_time_minutes)

    variable_percent = settings.taxes_percent + fee_percent + payment_fee_percent
    variable_cost = sale_price * variable_percent / 100
    base_cost = direct_cost + overhead_cost + fee_fixed + variable_cost
    profit_value = sale_price - base_cost
    profit_percent = profit_value / sale_price * 100 if sale_price else 0.0

    return ProfitBreakdown(
        direct_cost=round_money(direct_cost),
        overhead_cost=round_money(overhead_cost),
        variable_percent=round_money(variable_percent),
        fee_fixed=round_money(fee_fixed),
        sale_price=round_money(sale_price),
        profit_value=round_money(profit_value),
        profit_percent=round_money(profit_percent),
    )
