"""Totals for customer orders and quotes."""
from .pricing import round_money

PERCENT = 'PERCENT'
FIXED = 'FIXED'


def _number(value):
    return float(value or 0)


def calculate_products_total(products):
    return sum(_number(item.get('unit_price')) * _number(item.get('quantity')) for item in products or [])


def calculate_order_total(products, additions=None, discount_mode=FIXED, discount_value=0, shipping_value=0):
    """
    Order total = products + additions - discount + shipping.

    PERCENT additions are taken over the products total; a PERCENT discount is
    taken over products plus additions.
    """
    products_total = calculate_products_total(products)

    additions_total = 0.0
    for item in additions or []:
        if item.get('mode') == FIXED:
            additions_total += _number(item.get('value'))
        else:
            additions_total += products_total * _number(item.get('value')) / 100

    if discount_mode == PERCENT:
        discount_total = (products_total + additions_total) * _number(discount_value) / 100
    else:
        discount_total = _number(discount_value)

    return round_money(products_total + additions_total - discount_total + _number(shipping_value))


def calculate_amount_paid(payments):
    return round_money(sum(_number(payment.get('amount')) for payment in payments or []))
