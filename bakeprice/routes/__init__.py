from .admin import admin_blueprint
from .company import company_blueprint
from .customers import customers_blueprint
from .inputs import inputs_blueprint
from .orders import orders_blueprint
from .pricing import pricing_blueprint
from .products import products_blueprint
from .recipes import recipes_blueprint
