from __future__ import annotations

from flask import Blueprint, jsonify, abort

from models import StorageError, StorageErrorKind
from models.details import Details
from models.schemas.itinerary import DetailsSchema, DetailsOutSchema
from utils.decorators import validate_body
from utils.extensions import get_storage

bp = Blueprint("details", __name__)

details_schema = DetailsSchema()
# The owning itinerary is fixed once details exist
details_update_schema = DetailsSchema(exclude=("itinerary_id",))
details_list_out_schema = DetailsOutSchema(many=True, exclude=("optional",))
details_out_schema = DetailsOutSchema(exclude=("optional",))


def _get_details_or_404(itinerary_id: str) -> Details:
    details = get_storage().find_one(Details, itinerary_id=itinerary_id)
    if not details:
        abort(404, description="Itinerary details not found")
    return details


@bp.get("/itineraries/<itinerary_id>/details")
def get_itinerary_details(itinerary_id: str):
    """
    Details of an itinerary
    ---
    tags:
      - Details
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Itinerary details not found }
    """
    rows = get_storage().find_all(Details, itinerary_id=itinerary_id)
    if not rows:
        abort(404, description="Itinerary details not found")
    return jsonify(details_list_out_schema.dump(rows)), 200


@bp.post("/itineraries/details")
@validate_body(details_schema)
def create_itinerary_details(data):
    """
    Create the details of an itinerary
    ---
    tags:
      - Details
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            description: { type: string, minLength: 3 }
            tour: { type: string }
            alert: { type: string }
            duration: { type: number, minimum: 0, exclusiveMinimum: true }
            included: { type: string }
            notIncluded: { type: string }
            meetingPoint: { type: string }
            costPerPerson: { type: number }
            itinerary_id: { type: string, format: uuid }
            additional:
              type: object
              properties:
                security: { type: string }
                accessibility: { type: string }
                recommendations: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation or creation error }
    """
    storage = get_storage()
    details = Details(**data)
    storage.new(details)
    try:
        storage.save()
    except StorageError:
        # Unknown itinerary, or the itinerary already has details
        abort(400, description="Error creating itinerary details")

    return jsonify(details_out_schema.dump(details)), 201


@bp.patch("/itineraries/details/<itinerary_id>")
@validate_body(details_update_schema, partial=True)
def update_itinerary_details(itinerary_id: str, data):
    """
    Update the details of an itinerary
    ---
    tags:
      - Details
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
      - { in: body, name: body, schema: { type: object } }
    responses:
      200: { description: OK }
      404: { description: Itinerary details not found }
    """
    storage = get_storage()
    details = _get_details_or_404(itinerary_id)
    for key, value in data.items():
        setattr(details, key, value)
    storage.new(details)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error updating itinerary details")

    return jsonify(details_out_schema.dump(details)), 200


@bp.delete("/itineraries/details/<itinerary_id>")
def delete_itinerary_details(itinerary_id: str):
    """
    Delete the details of an itinerary
    ---
    tags:
      - Details
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
    responses:
      200: { description: Itinerary details deleted }
      404: { description: Itinerary details not found }
      409: { description: Optional add-ons still reference these details }
    """
    storage = get_storage()
    details = _get_details_or_404(itinerary_id)
    storage.delete(details)
    try:
        storage.save()
    except StorageError as err:
        if err.kind is StorageErrorKind.FOREIGN_KEY_VIOLATION:
            abort(409, description="Conflict: related data still exists.")
        raise

    return jsonify({"message": "Itinerary details deleted"}), 200
