import logging
import math
from flask import request
from flask_babel import gettext as _
from sqlalchemy.orm import selectinload

from ..errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from ..models import db, AuditLog, Company, Input, Product, Recipe
from ..pricing import UNITS, Catalog

logger = logging.getLogger(__name__)

COMPANY_HEADER = 'X-Company-Id'
ROLE_HEADER = 'X-User-Role'

MISSING = object()

# Largest magnitude accepted for any amount, quantity or percentage
MAX_NUMBER = 1e12


def log_audit(action, target_type, target_id=None, details=None, company_id=None):
    try:
        log = AuditLog(
            company_id=company_id or request.headers.get(COMPANY_HEADER),
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=details
        )
        db.session.add(log)
    except Exception:
        # Audit logging must not interrupt the main operation
        logger.warning("Failed to log audit %s %s %s", action, target_type, target_id, exc_info=True)

# ----------------------------
# Company scope
# ----------------------------
def current_company_id():
    company_id = request.headers.get(COMPANY_HEADER)
    if not company_id:
        raise UnauthorizedError(_('Company not identified'))
    return company_id


def current_company():
    company = db.session.get(Company, current_company_id())
    if not company:
        raise NotFoundError(_('Company not found'))
    return company


def require_admin():
    if request.headers.get(ROLE_HEADER) != 'admin':
        raise ForbiddenError(_('Admins only'))


def get_scoped_or_404(model, entity_id, message):
    """Fetch an entity by id, treating rows of other companies as missing."""
    entity = db.session.get(model, entity_id)
    if not entity or entity.company_id != current_company_id():
        raise NotFoundError(message)
    return entity


def load_catalog(company_id):
    """Snapshot of the company's inputs, recipes and products for the pricing engine."""
    inputs = Input.query.filter_by(company_id=company_id).all()
    recipes = Recipe.query.filter_by(company_id=company_id).options(selectinload(Recipe.components)).all()
    products = Product.query.filter_by(company_id=company_id).options(selectinload(Product.components)).all()
    return Catalog.build(
        inputs=[i.to_cost_input() for i in inputs],
        recipes=[r.to_cost_recipe() for r in recipes],
        products=[p.to_definition() for p in products]
    )

# ----------------------------
# Request parsing
# ----------------------------
def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError(_('Request body must be a JSON object'))
    return data


def parse_number(data, name, default=MISSING, minimum=None, positive=False):
    value = data.get(name)
    if value is None:
        if default is MISSING:
            raise ValidationError(_('%(field)s is required', field=name))
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(_('%(field)s must be a number', field=name))
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(_('%(field)s must be a number', field=name))
    if abs(value) > MAX_NUMBER:
        raise ValidationError(_('%(field)s is too large', field=name))
    if positive and value <= 0:
        raise ValidationError(_('%(field)s must be greater than zero', field=name))
    if minimum is not None and value < minimum:
        raise ValidationError(_('%(field)s must be at least %(minimum)s', field=name, minimum=minimum))
    return value


def parse_string(data, name, required=True, min_length=1):
    value = data.get(name)
    if value is None or value == '':
        if required:
            raise ValidationError(_('%(field)s is required', field=name))
        return None
    if not isinstance(value, str):
        raise ValidationError(_('%(field)s must be text', field=name))
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(_('%(field)s is too short', field=name))
    return value


def parse_choice(data, name, choices, default=MISSING):
    value = data.get(name)
    if value is None:
        if default is MISSING:
            raise ValidationError(_('%(field)s is required', field=name))
        return default
    if value not in choices:
        raise ValidationError(_('%(field)s must be one of: %(choices)s', field=name, choices=', '.join(choices)))
    return value


def parse_boolean(data, name, default=False):
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise ValidationError(_('%(field)s must be true or false', field=name))
    return value


def parse_list(data, name):
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(_('%(field)s must be a list', field=name))
    for item in value:
        if not isinstance(item, dict):
            raise ValidationError(_('%(field)s must be a list of objects', field=name))
    return value


def parse_component_lines(data, name, id_field, with_unit=False):
    """Parse [{<id_field>, quantity, unit?}, ...] into plain dicts."""
    lines = []
    for item in parse_list(data, name):
        line = {
            id_field: parse_string(item, id_field),
            'quantity': parse_number(item, 'quantity', positive=True)
        }
        if with_unit:
            line['unit'] = parse_choice(item, 'unit', UNITS)
        lines.append(line)
    return lines
