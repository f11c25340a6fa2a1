from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from app.services import CheckInService
from app.utils.identity import get_request_identity

check_in_bp = Blueprint("check_in", __name__)


@check_in_bp.route("/check-ins", methods=["POST"])
@jwt_required()
def create_check_in():
    data = request.get_json(silent=True) or {}
    check_in = CheckInService.check_in(get_request_identity(), data)
    return (
        jsonify({"message": "Check-in completed", "check_in": check_in.to_dict(include_registration=True)}),
        201,
    )


@check_in_bp.route("/check-ins/by-code", methods=["POST"])
@jwt_required()
def check_in_by_code():
    data = request.get_json(silent=True) or {}
    check_in = CheckInService.check_in_by_code(get_request_identity(), data)
    return (
        jsonify({"message": "Check-in completed", "check_in": check_in.to_dict(include_registration=True)}),
        201,
    )


@check_in_bp.route("/check-ins/<int:check_in_id>", methods=["GET"])
@jwt_required()
def get_check_in(check_in_id):
    check_in = CheckInService.get_check_in(get_request_identity(), check_in_id)
    return jsonify({"check_in": check_in.to_dict(include_registration=True)}), 200


@check_in_bp.route("/check-ins/<int:check_in_id>", methods=["DELETE"])
@jwt_required()
def delete_check_in(check_in_id):
    CheckInService.delete_check_in(get_request_identity(), check_in_id)
    return jsonify({"message": "Check-in deleted"}), 200
