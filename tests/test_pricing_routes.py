"""Recipe pricing and product endpoints."""
import pytest

from bakeprice.models import db, Company, Product
from .test_catalog_routes import create_input, create_recipe


@pytest.fixture
def catalog(client, headers):
    """Flour at 5.00/kg, boxes at 0.50 each and a recipe of 10 units costing 2.50."""
    flour = create_input(client, headers)
    box = create_input(client, headers, name='Caixa kraft', category='embalagem', unit='un',
                       package_size=10, package_price=5)
    recipe = create_recipe(client, headers, [{'input_id': flour['id'], 'quantity': 500, 'unit': 'g'}])
    return {'flour': flour, 'box': box, 'recipe': recipe}


def product_payload(catalog, **overrides):
    payload = {
        'name': 'Caixa de cookies',
        'recipe_id': catalog['recipe']['id'],
        'units_count': 10,
        'prep_time_minutes': 0,
        'packaging_inputs': [{'input_id': catalog['box']['id'], 'quantity': 1, 'unit': 'un'}],
    }
    payload.update(overrides)
    return payload


class TestPricePreview:

    def test_defaults_to_company_profit_and_first_channel(self, client, headers, catalog):
        response = client.post('/pricing/preview', json={'recipe_id': catalog['recipe']['id']}, headers=headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['direct_cost'] == 2.5
        assert data['overhead_cost'] == 0.3
        assert data['variable_percent'] == 36.5
        assert data['suggested_price'] == 4.41
        assert data['profit_value'] == 1.32
        assert data['profit_percent'] == 30

    def test_round_trip_through_profit(self, client, headers, company, catalog):
        payload = {'recipe_id': catalog['recipe']['id'], 'channel_id': company['channels'][1],
                   'target_profit_percent': 20}
        preview = client.post('/pricing/preview', json=payload, headers=headers).get_json()

        response = client.post('/pricing/profit', json={
            'recipe_id': catalog['recipe']['id'],
            'channel_id': company['channels'][1],
            'sale_price': preview['suggested_price'],
        }, headers=headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['variable_percent'] == 27
        assert data['profit_percent'] == pytest.approx(20, abs=0.1)

    def test_percentages_reaching_hundred(self, client, headers, company, catalog):
        response = client.post('/pricing/preview', json={
            'recipe_id': catalog['recipe']['id'],
            'channel_id': company['channels'][1],
            'target_profit_percent': 73,
        }, headers=headers)

        assert response.status_code == 422
        assert 'message' in response.get_json()

    def test_zero_sale_price(self, client, headers, catalog):
        response = client.post('/pricing/profit', json={
            'recipe_id': catalog['recipe']['id'], 'sale_price': 0
        }, headers=headers)
        assert response.get_json()['profit_percent'] == 0

    @pytest.mark.parametrize('raw_number', ['NaN', 'Infinity', '-Infinity'])
    def test_rejects_non_finite_sale_price(self, client, headers, catalog, raw_number):
        body = '{"recipe_id": "%s", "sale_price": %s}' % (catalog['recipe']['id'], raw_number)
        response = client.post('/pricing/profit', data=body, content_type='application/json', headers=headers)

        assert response.status_code == 400
        assert 'message' in response.get_json()

    def test_rejects_huge_sale_price(self, client, headers, catalog):
        response = client.post('/pricing/profit', json={
            'recipe_id': catalog['recipe']['id'], 'sale_price': 1e30
        }, headers=headers)
        assert response.status_code == 400

    def test_missing_recipe_id(self, client, headers):
        assert client.post('/pricing/preview', json={}, headers=headers).status_code == 400

    def test_other_company_recipe_is_not_found(self, app, client, headers, catalog):
        with app.app_context():
            other = Company(name='Outra Confeitaria')
            db.session.add(other)
            db.session.commit()
            other_id = other.id

        response = client.post('/pricing/preview', json={'recipe_id': catalog['recipe']['id']},
                               headers={'X-Company-Id': other_id})
        assert response.status_code == 404


class TestProducts:

    def test_create_prices_and_stores(self, client, headers, company, catalog):
        response = client.post('/products', json=product_payload(catalog), headers=headers)
        data = response.get_json()

        assert response.status_code == 201
        # 2.50 of recipe + 0.50 box, 12% overhead, 30% markup, 6.5% deductions
        assert data['preview']['direct_cost'] == 3.0
        assert data['preview']['overhead_cost'] == 0.36
        assert data['preview']['total_price'] == 4.67
        assert data['preview']['unit_price'] == 0.47
        assert data['product']['unit_price'] == 0.47
        assert data['product']['sale_price'] == 4.67
        assert data['product']['channel_id'] == company['channels'][0]
        assert data['product']['target_profit_percent'] == 30
        assert data['product']['priced_at'] is not None

    def test_preview_does_not_store(self, client, headers, catalog):
        response = client.post('/products/preview', json=product_payload(catalog), headers=headers)

        assert response.status_code == 200
        assert response.get_json()['total_price'] == 4.67
        assert client.get('/products', headers=headers).get_json() == []

    def test_unknown_base_recipe(self, client, headers, catalog):
        response = client.post('/products', json=product_payload(catalog, recipe_id='missing'), headers=headers)
        assert response.status_code == 404

    def test_units_count_must_be_positive(self, client, headers, catalog):
        response = client.post('/products', json=product_payload(catalog, units_count=0), headers=headers)
        assert response.status_code == 400

    def test_bundle_uses_cached_price(self, client, headers, catalog):
        single = client.post('/products', json=product_payload(catalog), headers=headers).get_json()
        bundle = client.post('/products', json={
            'name': 'Cesta de cafe',
            'units_count': 1,
            'extra_products': [{'product_id': single['product']['id'], 'quantity': 2}],
        }, headers=headers).get_json()

        assert bundle['preview']['direct_cost'] == 0.94
        assert bundle['product']['extra_products'] == [{'product_id': single['product']['id'], 'quantity': 2}]

    def test_reprice_after_input_change(self, client, headers, catalog):
        created = client.post('/products', json=product_payload(catalog), headers=headers).get_json()
        flour = catalog['flour']
        client.put(f"/inputs/{flour['id']}", json={
            'name': flour['name'], 'category': 'producao', 'unit': 'kg', 'package_size': 1, 'package_price': 10
        }, headers=headers)

        stale = client.get(f"/products/{created['product']['id']}", headers=headers).get_json()
        assert stale['unit_price'] == 0.47

        response = client.post('/products/reprice', headers=headers)
        repriced = response.get_json()['products']

        assert response.status_code == 200
        assert len(repriced) == 1
        assert repriced[0]['preview']['direct_cost'] == 5.5
        assert repriced[0]['product']['unit_price'] == 0.86

    def test_update_and_delete(self, app, client, headers, catalog):
        created = client.post('/products', json=product_payload(catalog), headers=headers).get_json()
        product_id = created['product']['id']

        response = client.put(f'/products/{product_id}', json=product_payload(
            catalog, name='Caixa com 20', units_count=20, packaging_inputs=[]
        ), headers=headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['product']['name'] == 'Caixa com 20'
        assert data['preview']['direct_cost'] == 5.0
        assert data['product']['packaging_inputs'] == []

        assert client.delete(f'/products/{product_id}', headers=headers).status_code == 204
        with app.app_context():
            assert db.session.get(Product, product_id) is None
