from flask import Blueprint, jsonify
from flask_babel import gettext as _

from ..models import db, Recipe, RecipeComponent
from ..pricing import UNITS, calculate_recipe_direct_cost, round_money
from .utils import (
    log_audit, current_company_id, get_scoped_or_404, load_catalog, get_json_body,
    parse_number, parse_string, parse_choice, parse_component_lines
)

recipes_blueprint = Blueprint('recipes', __name__)


def _apply_recipe_fields(recipe, data):
    recipe.name = parse_string(data, 'name', min_length=2)
    recipe.description = parse_string(data, 'description', required=False)
    recipe.prep_time_minutes = parse_number(data, 'prep_time_minutes', minimum=0)
    recipe.yield_quantity = parse_number(data, 'yield_quantity', positive=True)
    recipe.yield_unit = parse_choice(data, 'yield_unit', UNITS)
    recipe.notes = parse_string(data, 'notes', required=False)

    ingredients = parse_component_lines(data, 'ingredients', 'input_id', with_unit=True)
    sub_recipes = parse_component_lines(data, 'sub_recipes', 'recipe_id')

    # Lines referencing missing ids are accepted; they cost 0 until the id exists
    components = []
    for line in ingredients:
        components.append(RecipeComponent(
            component_type='input',
            component_id=line['input_id'],
            quantity=line['quantity'],
            unit=line['unit'],
            position=len(components)
        ))
    for line in sub_recipes:
        components.append(RecipeComponent(
            component_type='recipe',
            component_id=line['recipe_id'],
            quantity=line['quantity'],
            position=len(components)
        ))
    recipe.components = components

# ----------------------------
# Recipes Management
# ----------------------------
@recipes_blueprint.route('/recipes', methods=['GET'])
def list_recipes():
    recipes = Recipe.query.filter_by(company_id=current_company_id()).order_by(Recipe.name).all()
    return jsonify([r.to_dict() for r in recipes])

@recipes_blueprint.route('/recipes', methods=['POST'])
def add_recipe():
    recipe = Recipe(company_id=current_company_id())
    _apply_recipe_fields(recipe, get_json_body())

    db.session.add(recipe)
    db.session.flush()
    log_audit("CREATE", "Recipe", recipe.id, f"Created recipe {recipe.name}")
    db.session.commit()
    return jsonify(recipe.to_dict()), 201

@recipes_blueprint.route('/recipes/<string:recipe_id>', methods=['GET'])
def get_recipe(recipe_id):
    recipe = get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))
    return jsonify(recipe.to_dict())

@recipes_blueprint.route('/recipes/<string:recipe_id>', methods=['PUT'])
def edit_recipe(recipe_id):
    recipe = get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))
    _apply_recipe_fields(recipe, get_json_body())

    log_audit("UPDATE", "Recipe", recipe.id, f"Updated recipe {recipe.name}")
    db.session.commit()
    return jsonify(recipe.to_dict())

@recipes_blueprint.route('/recipes/<string:recipe_id>', methods=['DELETE'])
def delete_recipe(recipe_id):
    recipe = get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))
    db.session.delete(recipe)
    log_audit("DELETE", "Recipe", recipe_id, f"Deleted recipe {recipe.name}")
    db.session.commit()
    return '', 204

@recipes_blueprint.route('/recipes/<string:recipe_id>/cost', methods=['GET'])
def recipe_cost(recipe_id):
    recipe = get_scoped_or_404(Recipe, recipe_id, _('Recipe not found'))
    catalog = load_catalog(recipe.company_id)

    direct_cost = calculate_recipe_direct_cost(catalog.get_recipe(recipe.id), catalog)
    return jsonify({
        'recipe_id': recipe.id,
        'direct_cost': round_money(direct_cost),
        'cost_per_yield_unit': round_money(direct_cost / recipe.yield_quantity) if recipe.yield_quantity > 0 else 0
    })
