import pytest

from bakeprice.errors import DomainInvalidError
from bakeprice.pricing import (
    PER_UNIT, Catalog, CostInput, CostRecipe, ExtraProductLine, ExtraRecipeLine,
    IngredientLine, PackagingLine, PricingSettings, ProductDefinition, SalesChannelTerms,
    calculate_product_preview, reprice_products
)
from bakeprice.pricing.product_costing import calculate_product_direct_cost


@pytest.fixture
def inputs():
    return [
        CostInput(id='box', name='Caixa', unit='un', package_size=10, package_price=5, category='embalagem'),
        CostInput(id='flour', name='Farinha', unit='kg', package_size=1, package_price=8),
    ]


@pytest.fixture
def recipes():
    return [
        # 8.00 per batch of 4, so 2.00 per cookie
        CostRecipe(id='cookie', name='Cookie', yield_quantity=4, ingredients=[IngredientLine('flour', 1, 'kg')]),
        CostRecipe(id='broken', name='Sem rendimento', yield_quantity=0, ingredients=[IngredientLine('flour', 1, 'kg')]),
    ]


def make_catalog(inputs, recipes, *products):
    return Catalog.build(inputs=inputs, recipes=recipes, products=products)


class TestProductDirectCost:

    def test_packaging_only(self, inputs, recipes):
        product = ProductDefinition(id='p', name='Caixa avulsa',
                                    packaging_inputs=[PackagingLine('box', 3, 'un')])
        catalog = make_catalog(inputs, recipes)

        assert calculate_product_direct_cost(product, catalog, 1) == pytest.approx(1.5)
        preview = calculate_product_preview(product, catalog, PricingSettings())
        assert preview.direct_cost == 1.5
        assert preview.total_price == 1.5

    def test_base_recipe_scaled_by_units(self, inputs, recipes):
        product = ProductDefinition(id='p', name='Meia duzia', recipe_id='cookie', units_count=6)
        catalog = make_catalog(inputs, recipes)

        assert calculate_product_direct_cost(product, catalog, 6) == pytest.approx(12.0)

    def test_extra_recipes(self, inputs, recipes):
        product = ProductDefinition(id='p', name='Kit', extra_recipes=[
            ExtraRecipeLine('cookie', 2),
            ExtraRecipeLine('broken', 5),
            ExtraRecipeLine('missing', 1),
        ])
        catalog = make_catalog(inputs, recipes)

        assert calculate_product_direct_cost(product, catalog, 1) == pytest.approx(4.0)

    def test_extra_product_uses_cached_unit_price(self, inputs, recipes):
        priced = ProductDefinition(id='priced', name='Bolo', unit_price=3, sale_price=30)
        unpriced = ProductDefinition(id='unpriced', name='Torta', unit_price=0, sale_price=7)
        bundle = ProductDefinition(id='bundle', name='Cesta', extra_products=[
            ExtraProductLine('priced', 2),
            ExtraProductLine('unpriced', 2),
        ])
        catalog = make_catalog(inputs, recipes, priced, unpriced, bundle)

        assert calculate_product_direct_cost(bundle, catalog, 1) == pytest.approx(6.0 + 14.0)


class TestProductPreview:

    def test_units_count_floors_to_one(self, inputs, recipes):
        product = ProductDefinition(id='p', name='Cookie', recipe_id='cookie', units_count=0)
        preview = calculate_product_preview(product, make_catalog(inputs, recipes), PricingSettings())

        assert preview.units_count == 1.0
        assert preview.direct_cost == 2.0
        assert preview.unit_price == preview.total_price

    def test_per_unit_overhead_scaled_by_units(self, inputs, recipes):
        settings = PricingSettings(overhead_method=PER_UNIT, overhead_per_unit=0.5)
        product = ProductDefinition(id='p', name='Meia duzia', recipe_id='cookie', units_count=6)

        preview = calculate_product_preview(product, make_catalog(inputs, recipes), settings)

        assert preview.overhead_cost == 3.0
        assert preview.total_price == 15.0
        assert preview.unit_price == 2.5

    def test_markup_and_deductions(self, inputs, recipes):
        settings = PricingSettings(taxes_percent=4)
        product = ProductDefinition(id='p', name='Cookie', recipe_id='cookie',
                                    target_profit_percent=30, extra_percent=10)

        preview = calculate_product_preview(product, make_catalog(inputs, recipes), settings)

        # 2.00 * 1.4 / 0.96
        assert preview.variable_percent == 44.0
        assert preview.total_price == 2.92
        assert preview.profit_value == 0.8
        assert preview.profit_percent == 27.43

    def test_channel_fees(self, inputs, recipes):
        channel = SalesChannelTerms(id='ifood', name='iFood', fee_percent=20, fee_fixed=1)
        product = ProductDefinition(id='p', name='Cookie', recipe_id='cookie', units_count=4)

        preview = calculate_product_preview(product, make_catalog(inputs, recipes), PricingSettings(), channel)

        # (8 + 1) / 0.8
        assert preview.fee_fixed == 1.0
        assert preview.total_price == 11.25
        assert preview.unit_price == 2.81

    def test_impossible_deductions(self, inputs, recipes):
        settings = PricingSettings(taxes_percent=60)
        channel = SalesChannelTerms(id='ifood', name='iFood', fee_percent=40)
        product = ProductDefinition(id='p', name='Cookie', recipe_id='cookie')

        with pytest.raises(DomainInvalidError):
            calculate_product_preview(product, make_catalog(inputs, recipes), settings, channel)


class TestRepriceProducts:

    def test_referenced_products_are_priced_first(self, inputs, recipes):
        bundle = ProductDefinition(id='bundle', name='Cesta', extra_products=[ExtraProductLine('single', 2)])
        single = ProductDefinition(id='single', name='Cookie', recipe_id='cookie', unit_price=0)
        catalog = make_catalog(inputs, recipes, bundle, single)

        previews = reprice_products(catalog, PricingSettings())

        assert previews['single'].unit_price == 2.0
        assert previews['bundle'].direct_cost == 4.0
        # The catalog passed in keeps its cached prices
        assert catalog.get_product('single').unit_price == 0

    def test_bundle_cycle_keeps_cached_price(self, inputs, recipes):
        a = ProductDefinition(id='a', name='A', unit_price=1, extra_products=[ExtraProductLine('b', 1)])
        b = ProductDefinition(id='b', name='B', unit_price=2, extra_products=[ExtraProductLine('a', 1)],
                              packaging_inputs=[PackagingLine('box', 1, 'un')])
        catalog = make_catalog(inputs, recipes, a, b)

        previews = reprice_products(catalog, PricingSettings())

        # b is priced with a's cached 1.00, then a with b's fresh 1.50
        assert previews['b'].unit_price == 1.5
        assert previews['a'].unit_price == 1.5

    def test_uses_product_channel_or_first_channel(self, inputs, recipes):
        shop = SalesChannelTerms(id='shop', name='Loja')
        ifood = SalesChannelTerms(id='ifood', name='iFood', fee_percent=20)
        settings = PricingSettings(sales_channels=[shop, ifood])
        default = ProductDefinition(id='default', name='Cookie', recipe_id='cookie')
        delivery = ProductDefinition(id='delivery', name='Cookie delivery', recipe_id='cookie', channel_id='ifood')

        previews = reprice_products(make_catalog(inputs, recipes, default, delivery), settings)

        assert previews['default'].unit_price == 2.0
        assert previews['delivery'].unit_price == 2.5


def test_resolve_channel():
    shop = SalesChannelTerms(id='shop', name='Loja')
    ifood = SalesChannelTerms(id='ifood', name='iFood')
    settings = PricingSettings(sales_channels=[shop, ifood])

    assert settings.resolve_channel('ifood') is ifood
    assert settings.resolve_channel('unknown') is shop
    assert settings.resolve_channel(None) is shop
    assert PricingSettings().resolve_channel('ifood') is None
