# playtime/api/notifications/routes.py
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields

from playtime.core.errors import PlaytimeError
from playtime.services.sse import stream_live_query

notifications_bp = Blueprint('notifications_bp', __name__)


class NotificationResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    user_id = fields.Str(required=True)
    type = fields.Str(required=True)
    message = fields.Str(required=True)
    post_id = fields.Str(required=True)
    post_title = fields.Str(allow_none=True)
    from_user_id = fields.Str(required=True)
    from_user_name = fields.Str(allow_none=True)
    read = fields.Bool(required=True)
    created_at = fields.DateTime(allow_none=True)


@notifications_bp.route('', methods=['GET'])
@jwt_required()
def list_notifications():
    """내 알림 목록 (최신순)"""
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    try:
        items = notification_service.list_for_user(user_id)
        unread = sum(1 for item in items if not item['read'])
        return jsonify({"notifications": NotificationResponseSchema(many=True).dump(items), "unread_count": unread}), 200
    except PlaytimeError as e:
        return e.to_response()


@notifications_bp.route('/unread-count', methods=['GET'])
@jwt_required()
def get_unread_count():
    notification_service = current_app.services['notifications']
    return jsonify({"unread_count": notification_service.unread_count(get_jwt_identity())}), 200


@notifications_bp.route('/<string:notification_id>/read', methods=['POST'])
@jwt_required()
def mark_notification_read(notification_id: str):
    """알림 읽음 처리 (수신자 본인만 가능)"""
    notification_service = current_app.services['notifications']
    try:
        item = notification_service.mark_read(notification_id, get_jwt_identity())
        return jsonify(NotificationResponseSchema().dump(item)), 200
    except PlaytimeError as e:
        return e.to_response()


@notifications_bp.route('/stream', methods=['GET'])
@jwt_required()
def stream_notifications():
    """내 알림 실시간 구독 (Server-Sent Events)"""
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    return stream_live_query(
        lambda on_update, on_error: notification_service.live_for_user(user_id, on_update, on_error),
        lambda items: NotificationResponseSchema(many=True).dump(items),
    )
