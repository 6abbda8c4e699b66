"""Quantity conversion between compatible measurement units."""

COUNT_UNIT = 'un'

# Scale of each unit relative to the smallest unit of its family (g, ml)
UNIT_FACTORS = {
    'kg': 1000.0,
    'g': 1.0,
    'l': 1000.0,
    'ml': 1.0,
}

MASS_UNITS = ('kg', 'g')
VOLUME_UNITS = ('l', 'ml')
UNITS = MASS_UNITS + VOLUME_UNITS + (COUNT_UNIT,)


def unit_family(unit):
    if unit in MASS_UNITS:
        return 'mass'
    if unit in VOLUME_UNITS:
        return 'volume'
    return None


def normalize_quantity(quantity, unit, target):
    """
    Convert ``quantity`` expressed in ``unit`` into ``target``.

    Count units ('un') are never rescaled, and neither are pairs from different
    families (kg -> l): there is no density table, so the quantity is returned
    as entered. This function never raises.
    """
    if unit == COUNT_UNIT or target == COUNT_UNIT:
        return quantity

    family = unit_family(unit)
    if family is None or family != unit_family(target):
        return quantity

    return quantity * UNIT_FACTORS[unit] / UNIT_FACTORS[target]
