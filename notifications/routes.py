# notifications/routes.py
from flask import Blueprint, jsonify, g, current_app

from user_auth.utils import login_required_user
from utils.firestore_paths import notification_doc


def create_notifications_bp(db_instance):
    notifications_bp = Blueprint('notifications_bp', __name__, url_prefix='/notifications')

    @notifications_bp.route('/<notification_id>/read', methods=['POST'])
    @login_required_user
    def mark_notification_read(notification_id):
        user_uid = g.user_uid
        ref = notification_doc(db_instance, notification_id)
        snap = ref.get()

        if not snap.exists:
            return jsonify({"error": "not-found", "message": "Notification not found"}), 404

        data = snap.to_dict() or {}
        if data.get('to') != user_uid:
            current_app.logger.warning(f"User {user_uid} tried to mark notification {notification_id} of another user.")
            return jsonify({"error": "permission-denied", "message": "Not the notification recipient"}), 403

        if data.get('read') is True:
            return jsonify({"success": True, "alreadyRead": True}), 200

        try:
            ref.update({"read": True})
        except Exception as e:
            current_app.logger.error(f"Failed to mark notification {notification_id} read: {e}", exc_info=True)
            return jsonify({"error": "internal", "message": "Failed to mark read"}), 500

        return jsonify({"success": True}), 200

    return notifications_bp
