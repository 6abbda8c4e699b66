"""Demo tenant used for local development."""
from .models import db, Company, SalesChannel

DEMO_COMPANY_NAME = 'Confeitaria Demo'


def seed_demo_company():
    """Create the demo company with two sales channels, once."""
    company = Company.query.filter_by(name=DEMO_COMPANY_NAME).first()
    if company:
        return company, False

    company = Company(
        name=DEMO_COMPANY_NAME,
        overhead_method='PERCENT_DIRECT',
        overhead_percent=12,
        overhead_per_unit=0,
        labor_cost_per_hour=0,
        fixed_cost_per_hour=0,
        taxes_percent=4,
        default_profit_percent=30
    )
    company.sales_channels = [
        SalesChannel(name='Loja Propria', fee_percent=0, payment_fee_percent=2.5, fee_fixed=0, position=0),
        SalesChannel(name='iFood', fee_percent=23, payment_fee_percent=0, fee_fixed=0, position=1),
    ]
    db.session.add(company)
    db.session.commit()
    return company, True
