from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from app.services import EventService, RegistrationService, CheckInService, StatisticsService
from app.utils.identity import get_request_identity

event_bp = Blueprint("event", __name__)


def _event_payload():
    """Event fields come either as JSON or as multipart form data (with an image)."""
    if request.is_json:
        return request.get_json(silent=True) or {}, None
    return request.form.to_dict(), request.files.get("image")


@event_bp.route("/events", methods=["GET"])
def get_all_events():
    identity = get_request_identity(optional=True)
    events = EventService.get_events(identity, request.args)
    return jsonify({"events": events}), 200


@event_bp.route("/events", methods=["POST"])
@jwt_required()
def create_event():
    data, image = _event_payload()
    event = EventService.create_event(get_request_identity(), data, image)
    return jsonify({"message": "Event created successfully", "event": event.to_dict()}), 201


@event_bp.route("/events/<int:event_id>", methods=["GET"])
def get_event(event_id):
    identity = get_request_identity(optional=True)
    event = EventService.get_event(identity, event_id)
    return jsonify({"event": event.to_dict()}), 200


@event_bp.route("/events/<int:event_id>", methods=["PUT"])
@jwt_required()
def update_event(event_id):
    data, image = _event_payload()
    event = EventService.update_event(get_request_identity(), event_id, data, image)
    return jsonify({"message": "Event updated successfully", "event": event.to_dict()}), 200


@event_bp.route("/events/<int:event_id>", methods=["DELETE"])
@jwt_required()
def delete_event(event_id):
    EventService.delete_event(get_request_identity(), event_id)
    return jsonify({"message": "Event deleted successfully"}), 200


@event_bp.route("/events/<int:event_id>/participants", methods=["GET"])
@jwt_required()
def get_event_participants(event_id):
    event, registrations = RegistrationService.get_event_participants(
        get_request_identity(),
        event_id,
        status=request.args.get("status"),
        page=request.args.get("page", 1, type=int),
    )
    return jsonify({"event": event.to_dict(), "registrations": registrations}), 200


@event_bp.route("/events/<int:event_id>/check-ins", methods=["GET"])
@jwt_required()
def get_event_check_ins(event_id):
    event, check_ins = CheckInService.get_event_check_ins(
        get_request_identity(),
        event_id,
        on_date=request.args.get("date"),
        page=request.args.get("page", 1, type=int),
    )
    return jsonify({"event": event.to_dict(), "check_ins": check_ins}), 200


@event_bp.route("/events/<int:event_id>/check-in-statistics", methods=["GET"])
@jwt_required()
def get_event_statistics(event_id):
    event, statistics = StatisticsService.get_check_in_statistics(get_request_identity(), event_id)
    return jsonify({"event": event.to_dict(), "statistics": statistics}), 200
