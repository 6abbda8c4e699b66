import logging

from .units import normalize_quantity

logger = logging.getLogger(__name__)


def calculate_input_line_cost(cost_input, quantity, unit):
    """Cost of ``quantity`` ``unit`` of an input bought at its package price."""
    normalized_quantity = normalize_quantity(quantity, unit, cost_input.unit)
    return cost_input.unit_cost * normalized_quantity


def calculate_recipe_direct_cost(recipe, catalog, visiting=None):
    """
    Recursively calculates the direct cost of one full batch of a recipe.

    Ingredients are priced from the input catalog; sub-recipes are priced per
    unit of their own yield and multiplied by the consumed quantity.

    ``visiting`` holds the ids of recipes already entered in this call chain and
    is shared by every branch, so a recipe met a second time (a cycle, or the
    second arm of a diamond) contributes 0 instead of recursing again.
    Missing inputs and sub-recipes also contribute 0.
    """
    if visiting is None:
        visiting = set()

    if recipe.id in visiting:
        logger.debug("Recipe %s already resolved in this chain, contributing 0", recipe.id)
        return 0.0

    visiting.add(recipe.id)

    inputs_cost = 0.0
    for line in recipe.ingredients:
        cost_input = catalog.get_input(line.input_id)
        if not cost_input:
            continue
        inputs_cost += calculate_input_line_cost(cost_input, line.quantity, line.unit)

    sub_recipes_cost = 0.0
    for line in recipe.sub_recipes:
        sub_recipe = catalog.get_recipe(line.recipe_id)
        if not sub_recipe or sub_recipe.yield_quantity <= 0:
            continue
        sub_total = calculate_recipe_direct_cost(sub_recipe, catalog, visiting)
        sub_recipes_cost += (sub_total / sub_recipe.yield_quantity) * line.quantity

    return inputs_cost + sub_recipes_cost


def calculate_recipe_unit_cost(recipe, catalog):
    """Direct cost per unit of yield, or the batch cost when yield is not positive."""
    total = calculate_recipe_direct_cost(recipe, catalog)
    if recipe.yield_quantity > 0:
        return total / recipe.yield_quantity
    return total
