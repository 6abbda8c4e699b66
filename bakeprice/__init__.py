import logging
import os
import click
from flask import Flask, request, session, jsonify
from flask_babel import Babel, gettext as _
from sqlalchemy.exc import SQLAlchemyError

from .errors import BakepriceError
from .models import db

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_locale():
    selected_locale = request.args.get('lang', session.get('lang', 'pt_BR'))
    return selected_locale


def configure_logging(app):
    level = app.config.get('LOG_LEVEL', 'DEBUG' if app.debug else 'INFO')
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger('bakeprice').setLevel(level)
    app.logger.setLevel(level)
    if level > logging.DEBUG:
        for noisy in ('werkzeug', 'sqlalchemy.engine'):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def register_error_handlers(app):
    @app.errorhandler(BakepriceError)
    def handle_bakeprice_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({'message': _('Database error, please try again')}), 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'message': _('Not found')}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': _('Method not allowed')}), 405


def register_commands(app):
    @app.cli.command('seed-demo')
    def seed_demo():
        """Create the demo company and its sales channels."""
        from .seed import seed_demo_company
        company, created = seed_demo_company()
        if created:
            click.echo(f"Created demo company {company.id}")
        else:
            click.echo(f"Demo company already exists: {company.id}")


def create_app(config=None):
    app = Flask(__name__)

    @app.before_request
    def before_request():
        """Capture language parameter and save to session for persistence across requests"""
        if 'lang' in request.args:
            session['lang'] = request.args.get('lang')

    # Load configurations
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///bakeprice.db")
    app.config['SQLALCHEMY_DATABASE_URI'] = DATABASE_URL
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Secret key for session management (language selection)
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['CURRENCY_SYMBOL'] = os.getenv('CURRENCY_SYMBOL', 'R$')

    app.config['BABEL_DEFAULT_LOCALE'] = 'pt_BR'
    app.config['BABEL_SUPPORTED_LOCALES'] = ['pt_BR', 'en']

    if config:
        app.config.update(config)

    configure_logging(app)

    Babel(app, locale_selector=get_locale)

    # Initialize database
    db.init_app(app)

    @app.route('/health')
    def health():
        return jsonify({'ok': True})

    # Register blueprints
    from .routes import admin_blueprint, company_blueprint, customers_blueprint, inputs_blueprint, orders_blueprint, pricing_blueprint, products_blueprint, recipes_blueprint
    app.register_blueprint(company_blueprint)
    app.register_blueprint(inputs_blueprint)
    app.register_blueprint(recipes_blueprint)
    app.register_blueprint(pricing_blueprint)
    app.register_blueprint(products_blueprint)
    app.register_blueprint(customers_blueprint)
    app.register_blueprint(orders_blueprint)
    app.register_blueprint(admin_blueprint)

    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        db.create_all()

    logger.info("bakeprice started with database %s", app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])
    return app
