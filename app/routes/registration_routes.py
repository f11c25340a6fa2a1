from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from app.services import RegistrationService
from app.utils.identity import get_request_identity

registration_bp = Blueprint("registration", __name__)


@registration_bp.route("/registrations", methods=["POST"])
@jwt_required()
def create_registration():
    data = request.get_json(silent=True) or {}
    registration, guest_registrations = RegistrationService.create_registration(
        get_request_identity(), data
    )
    return (
        jsonify(
            {
                "message": "Successfully registered for event",
                "registration": registration.to_dict(),
                "guest_registrations": [g.to_dict() for g in guest_registrations],
            }
        ),
        201,
    )


@registration_bp.route("/registrations", methods=["GET"])
@jwt_required()
def get_my_registrations():
    registrations = RegistrationService.get_user_registrations(
        get_request_identity(), page=request.args.get("page", 1, type=int)
    )
    return jsonify({"registrations": registrations}), 200


@registration_bp.route("/registrations/<int:registration_id>", methods=["GET"])
@jwt_required()
def get_registration(registration_id):
    registration = RegistrationService.get_user_registration(get_request_identity(), registration_id)
    return jsonify({"registration": registration.to_dict(include_event=True)}), 200


@registration_bp.route("/registrations/<int:registration_id>/cancel", methods=["POST"])
@jwt_required()
def cancel_registration(registration_id):
    registration = RegistrationService.cancel_registration(get_request_identity(), registration_id)
    return (
        jsonify({"message": "Registration cancelled", "registration": registration.to_dict()}),
        200,
    )


@registration_bp.route("/registrations/<int:registration_id>/status", methods=["PATCH"])
@jwt_required()
def update_registration_status(registration_id):
    data = request.get_json(silent=True) or {}
    registration = RegistrationService.update_status(get_request_identity(), registration_id, data)
    return (
        jsonify({"message": "Registration status updated", "registration": registration.to_dict()}),
        200,
    )
