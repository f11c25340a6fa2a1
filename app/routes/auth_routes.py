from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from app.extensions import limiter
from app.services import UserService
from app.utils.identity import get_request_identity
from app.utils.validation import require_fields

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/signup", methods=["POST"])
def sign_up():
    user_data = request.get_json(silent=True) or {}
    result = UserService.sign_up(user_data)
    return jsonify(result), 201


@auth_bp.route("/signin", methods=["POST"])
@limiter.limit("10 per minute")
def sign_in():
    user_data = request.get_json(silent=True) or {}
    require_fields(user_data, ["email", "password"])
    result = UserService.sign_in(user_data["email"], user_data["password"])
    return jsonify(result), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = UserService.get_user(get_request_identity())
    return jsonify({"user": user.to_dict()}), 200
