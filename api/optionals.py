from __future__ import annotations

from flask import Blueprint, jsonify, abort

from models import StorageError
from models.optional_item import OptionalItem
from models.schemas.itinerary import OptionalSchema, OptionalOutSchema
from utils.decorators import validate_body
from utils.extensions import get_storage

bp = Blueprint("optionals", __name__)

optional_schema = OptionalSchema()
optional_update_schema = OptionalSchema(exclude=("detail_id",))
optional_out_schema = OptionalOutSchema()
optional_list_out_schema = OptionalOutSchema(many=True)


def _get_optional_or_404(optional_id: str) -> OptionalItem:
    item = get_storage().get(OptionalItem, optional_id)
    if not item:
        abort(404, description="Itinerary optional not found")
    return item


@bp.get("/itineraries/details/<detail_id>/optional")
def get_itinerary_optional(detail_id: str):
    """
    Optional add-ons of a details entry
    ---
    tags:
      - Optional
    parameters:
      - { in: path, name: detail_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Optional not found }
    """
    rows = get_storage().find_all(OptionalItem, detail_id=detail_id)
    if not rows:
        abort(404, description="Optional not found")
    return jsonify(optional_list_out_schema.dump(rows)), 200


@bp.post("/itineraries/details/optional")
@validate_body(optional_schema)
def create_itinerary_optional(data):
    """
    Add an optional add-on to a details entry
    ---
    tags:
      - Optional
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, minLength: 3 }
            price: { type: number }
            duration: { type: number }
            description: { type: string }
            observations: { type: string }
            detail_id: { type: string, format: uuid }
    responses:
      201: { description: Created }
      400: { description: Validation or creation error }
    """
    storage = get_storage()
    item = OptionalItem(**data)
    storage.new(item)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error creating itinerary optional")

    return jsonify(optional_out_schema.dump(item)), 201


@bp.patch("/itineraries/details/optional/<optional_id>")
@validate_body(optional_update_schema, partial=True)
def update_itinerary_optional(optional_id: str, data):
    """
    Update an optional add-on
    ---
    tags:
      - Optional
    parameters:
      - { in: path, name: optional_id, type: string, required: true }
      - { in: body, name: body, schema: { type: object } }
    responses:
      200: { description: OK }
      404: { description: Itinerary optional not found }
    """
    storage = get_storage()
    item = _get_optional_or_404(optional_id)
    for key, value in data.items():
        setattr(item, key, value)
    storage.new(item)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error updating itinerary optional")

    return jsonify(optional_out_schema.dump(item)), 200


@bp.delete("/itineraries/details/optional/<optional_id>")
def delete_itinerary_optional(optional_id: str):
    """
    Delete an optional add-on
    ---
    tags:
      - Optional
    parameters:
      - { in: path, name: optional_id, type: string, required: true }
    responses:
      200: { description: Itinerary optional deleted }
      404: { description: Itinerary optional not found }
    """
    storage = get_storage()
    storage.delete(_get_optional_or_404(optional_id))
    storage.save()
    return jsonify({"message": "Itinerary optional deleted"}), 200
