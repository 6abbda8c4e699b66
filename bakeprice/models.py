import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

from .pricing import (
    CostInput, CostRecipe, ExtraProductLine, ExtraRecipeLine, IngredientLine,
    PackagingLine, PricingSettings, ProductDefinition, SalesChannelTerms, SubRecipeLine,
    calculate_amount_paid, calculate_order_total,
)

db = SQLAlchemy()


def new_id():
    return str(uuid.uuid4())


class Company(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Pricing settings
    overhead_method = db.Column(db.String(20), nullable=False, default='PERCENT_DIRECT')  # 'PERCENT_DIRECT' or 'PER_UNIT'
    overhead_percent = db.Column(db.Float, nullable=False, default=0.0)  # % of direct cost
    overhead_per_unit = db.Column(db.Float, nullable=False, default=0.0)  # flat amount per unit
    labor_cost_per_hour = db.Column(db.Float, nullable=False, default=0.0)
    fixed_cost_per_hour = db.Column(db.Float, nullable=False, default=0.0)
    taxes_percent = db.Column(db.Float, nullable=False, default=0.0)  # over the sale price
    default_profit_percent = db.Column(db.Float, nullable=False, default=0.0)

    sales_channels = db.relationship(
        'SalesChannel', backref='company', order_by='SalesChannel.position',
        cascade='all, delete-orphan'
    )

    def settings_dict(self):
        return {
            'overhead_method': self.overhead_method,
            'overhead_percent': self.overhead_percent,
            'overhead_per_unit': self.overhead_per_unit,
            'labor_cost_per_hour': self.labor_cost_per_hour,
            'fixed_cost_per_hour': self.fixed_cost_per_hour,
            'taxes_percent': self.taxes_percent,
            'default_profit_percent': self.default_profit_percent,
            'sales_channels': [c.to_dict() for c in self.sales_channels]
        }

    def to_pricing_settings(self):
        return PricingSettings(
            overhead_method=self.overhead_method,
            overhead_percent=self.overhead_percent,
            overhead_per_unit=self.overhead_per_unit,
            labor_cost_per_hour=self.labor_cost_per_hour,
            fixed_cost_per_hour=self.fixed_cost_per_hour,
            taxes_percent=self.taxes_percent,
            default_profit_percent=self.default_profit_percent,
            sales_channels=[c.to_terms() for c in self.sales_channels]
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'settings': self.settings_dict()
        }


class SalesChannel(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    fee_percent = db.Column(db.Float, nullable=False, default=0.0)  # marketplace commission
    payment_fee_percent = db.Column(db.Float, nullable=False, default=0.0)  # payment processor fee
    fee_fixed = db.Column(db.Float, nullable=False, default=0.0)  # per transaction
    active = db.Column(db.Boolean, nullable=False, default=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    def to_terms(self):
        return SalesChannelTerms(
            id=self.id,
            name=self.name,
            fee_percent=self.fee_percent,
            payment_fee_percent=self.payment_fee_percent,
            fee_fixed=self.fee_fixed,
            active=self.active
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'fee_percent': self.fee_percent,
            'payment_fee_percent': self.payment_fee_percent,
            'fee_fixed': self.fee_fixed,
            'active': self.active
        }


class Input(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    brand = db.Column(db.String(100), nullable=True)
    category = db.Column(db.String(20), nullable=False, default='producao')  # 'producao', 'embalagem', 'outros'
    unit = db.Column(db.String(5), nullable=False)
    package_size = db.Column(db.Float, nullable=False)
    package_price = db.Column(db.Float, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    @property
    def unit_cost(self):
        return self.package_price / self.package_size if self.package_size > 0 else 0

    def to_cost_input(self):
        return CostInput(
            id=self.id,
            name=self.name,
            unit=self.unit,
            package_size=self.package_size,
            package_price=self.package_price,
            category=self.category
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'brand': self.brand,
            'category': self.category,
            'unit': self.unit,
            'package_size': self.package_size,
            'package_price': self.package_price,
            'unit_cost': self.unit_cost,
            'notes': self.notes
        }


class Recipe(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    prep_time_minutes = db.Column(db.Float, nullable=False, default=0.0)
    yield_quantity = db.Column(db.Float, nullable=False)
    yield_unit = db.Column(db.String(5), nullable=False, default='un')
    notes = db.Column(db.Text, nullable=True)

    components = db.relationship(
        'RecipeComponent', backref='recipe', order_by='RecipeComponent.position',
        cascade='all, delete-orphan'
    )

    @property
    def ingredients(self):
        return [c for c in self.components if c.component_type == 'input']

    @property
    def sub_recipes(self):
        return [c for c in self.components if c.component_type == 'recipe']

    def to_cost_recipe(self):
        return CostRecipe(
            id=self.id,
            name=self.name,
            yield_quantity=self.yield_quantity,
            yield_unit=self.yield_unit,
            prep_time_minutes=self.prep_time_minutes or 0,
            ingredients=[IngredientLine(c.component_id, c.quantity, c.unit) for c in self.ingredients],
            sub_recipes=[SubRecipeLine(c.component_id, c.quantity) for c in self.sub_recipes]
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'prep_time_minutes': self.prep_time_minutes,
            'yield_quantity': self.yield_quantity,
            'yield_unit': self.yield_unit,
            'ingredients': [
                {'input_id': c.component_id, 'quantity': c.quantity, 'unit': c.unit}
                for c in self.ingredients
            ],
            'sub_recipes': [
                {'recipe_id': c.component_id, 'quantity': c.quantity}
                for c in self.sub_recipes
            ],
            'notes': self.notes
        }


class RecipeComponent(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.String(36), db.ForeignKey('recipe.id'), nullable=False)
    component_type = db.Column(db.String(10), nullable=False)  # 'input' or 'recipe'
    component_id = db.Column(db.String(36), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(5), nullable=True)  # only for inputs
    position = db.Column(db.Integer, nullable=False, default=0)


class Product(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    recipe_id = db.Column(db.String(36), nullable=True)  # base recipe, optional for pure bundles
    prep_time_minutes = db.Column(db.Float, nullable=False, default=0.0)
    notes = db.Column(db.Text, nullable=True)
    units_count = db.Column(db.Float, nullable=False, default=1.0)
    target_profit_percent = db.Column(db.Float, nullable=False, default=0.0)
    extra_percent = db.Column(db.Float, nullable=False, default=0.0)
    channel_id = db.Column(db.String(36), nullable=True)

    # Outputs of the last pricing run
    unit_price = db.Column(db.Float, nullable=False, default=0.0)
    sale_price = db.Column(db.Float, nullable=False, default=0.0)
    priced_at = db.Column(db.DateTime, nullable=True)

    components = db.relationship(
        'ProductComponent', backref='product', order_by='ProductComponent.position',
        cascade='all, delete-orphan'
    )

    def _components_of(self, component_type):
        return [c for c in self.components if c.component_type == component_type]

    def to_definition(self):
        return ProductDefinition(
            id=self.id,
            name=self.name,
            recipe_id=self.recipe_id,
            units_count=self.units_count,
            prep_time_minutes=self.prep_time_minutes or 0,
            target_profit_percent=self.target_profit_percent,
            extra_percent=self.extra_percent,
            channel_id=self.channel_id,
            extra_recipes=[ExtraRecipeLine(c.component_id, c.quantity) for c in self._components_of('recipe')],
            extra_products=[ExtraProductLine(c.component_id, c.quantity) for c in self._components_of('product')],
            packaging_inputs=[
                PackagingLine(c.component_id, c.quantity, c.unit) for c in self._components_of('packaging')
            ],
            unit_price=self.unit_price or 0,
            sale_price=self.sale_price or 0
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'recipe_id': self.recipe_id,
            'prep_time_minutes': self.prep_time_minutes,
            'notes': self.notes,
            'units_count': self.units_count,
            'target_profit_percent': self.target_profit_percent,
            'extra_percent': self.extra_percent,
            'channel_id': self.channel_id,
            'unit_price': self.unit_price,
            'sale_price': self.sale_price,
            'priced_at': self.priced_at.isoformat() if self.priced_at else None,
            'extra_recipes': [
                {'recipe_id': c.component_id, 'quantity': c.quantity}
                for c in self._components_of('recipe')
            ],
            'extra_products': [
                {'product_id': c.component_id, 'quantity': c.quantity}
                for c in self._components_of('product')
            ],
            'packaging_inputs': [
                {'input_id': c.component_id, 'quantity': c.quantity, 'unit': c.unit}
                for c in self._components_of('packaging')
            ]
        }


class ProductComponent(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.String(36), db.ForeignKey('product.id'), nullable=False)
    component_type = db.Column(db.String(10), nullable=False)  # 'recipe', 'product', 'packaging'
    component_id = db.Column(db.String(36), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(5), nullable=True)  # only for packaging
    position = db.Column(db.Integer, nullable=False, default=0)


class Customer(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(30), nullable=False)
    person_type = db.Column(db.String(2), nullable=False, default='PF')  # 'PF' person, 'PJ' business
    email = db.Column(db.String(100), nullable=True)
    address = db.Column(db.String(200), nullable=True)
    number = db.Column(db.String(20), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    neighborhood = db.Column(db.String(100), nullable=True)
    zip_code = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'person_type': self.person_type,
            'email': self.email,
            'address': self.address,
            'number': self.number,
            'city': self.city,
            'neighborhood': self.neighborhood,
            'zip_code': self.zip_code,
            'notes': self.notes
        }


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('company.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)  # 'PEDIDO' (order) or 'ORCAMENTO' (quote)
    order_datetime = db.Column(db.DateTime, nullable=False)
    customer_id = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=True)
    customer_snapshot = db.Column(db.JSON, nullable=True)
    delivery_type = db.Column(db.String(20), nullable=False)  # 'ENTREGA' or 'RETIRADA'
    delivery_date = db.Column(db.String(30), nullable=True)
    status = db.Column(db.String(30), nullable=False)
    products = db.Column(db.JSON, nullable=False, default=list)
    additions = db.Column(db.JSON, nullable=False, default=list)
    discount_mode = db.Column(db.String(10), nullable=False, default='FIXED')
    discount_value = db.Column(db.Float, nullable=False, default=0.0)
    shipping_value = db.Column(db.Float, nullable=False, default=0.0)
    notes_delivery = db.Column(db.Text, nullable=True)
    notes_general = db.Column(db.Text, nullable=True)
    notes_payment = db.Column(db.Text, nullable=True)
    pix = db.Column(db.String(100), nullable=True)
    terms = db.Column(db.Text, nullable=True)
    payments = db.Column(db.JSON, nullable=False, default=list)
    alerts = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    customer = db.relationship('Customer', backref='orders')

    @property
    def total(self):
        return calculate_order_total(
            self.products, self.additions, self.discount_mode,
            self.discount_value, self.shipping_value
        )

    @property
    def amount_paid(self):
        return calculate_amount_paid(self.payments)

    def to_summary_dict(self):
        snapshot = self.customer_snapshot or {}
        return {
            'id': self.id,
            'status': self.status,
            'order_datetime': self.order_datetime.isoformat(),
            'delivery_date': self.delivery_date,
            'customer_name': snapshot.get('name') or 'Sem cliente',
            'products': [
                {'name': item.get('name'), 'quantity': float(item.get('quantity') or 0)}
                for item in self.products or []
            ],
            'total': self.total
        }

    def to_list_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'order_datetime': self.order_datetime.isoformat(),
            'delivery_date': self.delivery_date,
            'status': self.status,
            'customer_snapshot': self.customer_snapshot,
            'total': self.total
        }

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'order_datetime': self.order_datetime.isoformat(),
            'customer_id': self.customer_id,
            'customer_snapshot': self.customer_snapshot,
            'delivery_type': self.delivery_type,
            'delivery_date': self.delivery_date,
            'status': self.status,
            'products': self.products or [],
            'additions': self.additions or [],
            'discount_mode': self.discount_mode,
            'discount_value': self.discount_value,
            'shipping_value': self.shipping_value,
            'notes_delivery': self.notes_delivery,
            'notes_general': self.notes_general,
            'notes_payment': self.notes_payment,
            'pix': self.pix,
            'terms': self.terms,
            'payments': self.payments or [],
            'alerts': self.alerts or [],
            'total': self.total,
            'amount_paid': self.amount_paid
        }


class AuditLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(36), nullable=True, index=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    action = db.Column(db.String(50), nullable=False)
    target_type = db.Column(db.String(50), nullable=False)
    target_id = db.Column(db.String(36), nullable=True)
    details = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.strftime('%Y-%m-%d %H:%M:%S'),
            'action': self.action,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'details': self.details
        }
