"""
Pytest configuration and shared fixtures for bakeprice tests.
"""
import os
import tempfile
import pytest

from bakeprice import create_app
from bakeprice.models import db
from bakeprice.seed import seed_demo_company


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    # Create a temporary file to use as the database
    db_fd, db_path = tempfile.mkstemp()

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
        'LOG_LEVEL': 'WARNING',
    })

    yield app

    # Clean up database
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def company(app):
    """The demo company: 12% overhead over direct cost, 4% taxes, two channels."""
    with app.app_context():
        company, _created = seed_demo_company()
        return {
            'id': company.id,
            'channels': [c.id for c in company.sales_channels],
        }


@pytest.fixture
def headers(company):
    """Headers of a common user of the demo company."""
    return {'X-Company-Id': company['id'], 'X-User-Role': 'common'}


@pytest.fixture
def admin_headers(company):
    return {'X-Company-Id': company['id'], 'X-User-Role': 'admin'}
