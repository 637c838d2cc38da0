# trips/routes.py
from flask import Blueprint, request, jsonify, g, current_app

from errors import InvalidArgumentError, SlugTakenError, TripError
from trips.service import (
    can_view_trip, create_trip, delete_trip, get_trip_by_slug,
    is_slug_available, list_owner_trips, update_trip,
)
from user_auth.utils import login_required_user, optional_user
from utils.slug import normalize_slug


def _error_response(err):
    return jsonify(err.to_dict()), err.status


def create_trips_bp(db_instance):
    trips_bp = Blueprint('trips_bp', __name__)

    @trips_bp.route('/check-slug', methods=['POST'])
    def check_slug():
        data = request.get_json(silent=True) or {}
        slug = normalize_slug(data.get('slug') or "")
        if not slug:
            return jsonify({"error": "missing-slug"}), 400

        try:
            available = is_slug_available(db_instance, slug)
        except Exception as e:
            current_app.logger.error(f"check-slug error for '{slug}': {e}", exc_info=True)
            return jsonify({"error": "internal"}), 500

        return jsonify({"available": available}), 200

    @trips_bp.route('/create-trip', methods=['POST'])
    @login_required_user
    def create_trip_route():
        data = request.get_json(silent=True) or {}
        slug = normalize_slug(data.get('slug') or "")
        if not slug:
            return jsonify({"error": "missing-slug"}), 400

        trip_data = data.get('tripData') or {}
        if not isinstance(trip_data, dict):
            return jsonify({"error": "invalid-argument", "message": "tripData must be an object."}), 400

        try:
            result = create_trip(db_instance, g.user_uid, slug, trip_data)
        except SlugTakenError:
            return jsonify({"error": "already-exists", "message": "Slug already taken"}), 409
        except InvalidArgumentError as e:
            return _error_response(e)
        except Exception as e:
            current_app.logger.error(f"create-trip error for user {g.user_uid}: {e}", exc_info=True)
            return jsonify({"error": str(e) or "internal"}), 500

        return jsonify(result), 200

    @trips_bp.route('/my-trips', methods=['GET'])
    @login_required_user
    def my_trips():
        try:
            trips = list_owner_trips(db_instance, g.user_uid)
        except Exception as e:
            current_app.logger.error(f"Error listing trips for user {g.user_uid}: {e}", exc_info=True)
            return jsonify({"error": "internal"}), 500
        return jsonify({"trips": trips}), 200

    @trips_bp.route('/t/<slug>', methods=['GET'])
    @optional_user
    def trip_by_slug(slug):
        try:
            trip = get_trip_by_slug(db_instance, slug)
        except TripError as e:
            return _error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error resolving slug '{slug}': {e}", exc_info=True)
            return jsonify({"error": "internal"}), 500

        # private trips look exactly like missing ones to outsiders
        if not can_view_trip(trip, g.user_uid):
            return jsonify({"error": "not-found", "message": "Trip not found"}), 404
        return jsonify({"trip": trip}), 200

    @trips_bp.route('/trips/<trip_id>', methods=['PATCH'])
    @login_required_user
    def edit_trip(trip_id):
        changes = request.get_json(silent=True)
        try:
            result = update_trip(db_instance, g.user_uid, trip_id, changes)
        except TripError as e:
            current_app.logger.info(f"Trip {trip_id} update rejected for {g.user_uid}: {e.code}")
            return _error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error updating trip {trip_id} for {g.user_uid}: {e}", exc_info=True)
            return jsonify({"error": "internal"}), 500
        return jsonify(result), 200

    @trips_bp.route('/trips/<trip_id>', methods=['DELETE'])
    @login_required_user
    def remove_trip(trip_id):
        try:
            result = delete_trip(db_instance, g.user_uid, trip_id)
        except TripError as e:
            return _error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error deleting trip {trip_id} for {g.user_uid}: {e}", exc_info=True)
            return jsonify({"error": "internal"}), 500
        return jsonify(result), 200

    return trips_bp
