import json

import pytest

from bakeprice.models import Company
from bakeprice.seed import DEMO_COMPANY_NAME
from .test_catalog_routes import create_input


class TestBackup:

    def test_requires_admin(self, client, headers):
        assert client.get('/admin/backup', headers=headers).status_code == 403

    def test_exports_company_records(self, client, headers, admin_headers, company):
        create_input(client, headers)
        create_input(client, headers, name='Acucar refinado')

        response = client.get('/admin/backup', headers=admin_headers)
        data = json.loads(response.data)

        assert response.status_code == 200
        assert response.mimetype == 'application/json'
        assert 'attachment' in response.headers['Content-Disposition']
        assert data['company']['id'] == company['id']
        assert len(data['inputs']) == 2
        assert data['statistics']['model_counts']['inputs'] == 2
        assert data['statistics']['total_records'] == 2


class TestAuditLog:

    def test_records_changes_per_company(self, client, headers, admin_headers):
        created = create_input(client, headers)
        client.get('/admin/backup', headers=admin_headers)

        response = client.get('/audit_log', headers=admin_headers)
        entries = response.get_json()

        assert response.status_code == 200
        assert [(e['action'], e['target_type']) for e in entries] == [('BACKUP', 'Company'), ('CREATE', 'Input')]
        assert entries[1]['target_id'] == created['id']

    def test_limit(self, client, headers, admin_headers):
        for name in ('Farinha', 'Acucar', 'Manteiga'):
            create_input(client, headers, name=name)
        assert len(client.get('/audit_log?limit=2', headers=admin_headers).get_json()) == 2

    @pytest.mark.parametrize('limit', [0, -1])
    def test_limit_is_at_least_one(self, client, headers, admin_headers, limit):
        for name in ('Farinha', 'Acucar'):
            create_input(client, headers, name=name)
        assert len(client.get(f'/audit_log?limit={limit}', headers=admin_headers).get_json()) == 1

    def test_requires_admin(self, client, headers):
        assert client.get('/audit_log', headers=headers).status_code == 403


class TestSeedCommand:

    def test_creates_demo_company_once(self, app, runner):
        result = runner.invoke(args=['seed-demo'])
        assert 'Created demo company' in result.output

        result = runner.invoke(args=['seed-demo'])
        assert 'already exists' in result.output

        with app.app_context():
            assert Company.query.filter_by(name=DEMO_COMPANY_NAME).count() == 1
