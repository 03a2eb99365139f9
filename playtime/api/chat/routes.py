# playtime/api/chat/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.chat.schemas import ChatSendSchema, ChatMessageResponseSchema
from playtime.core.errors import PlaytimeError
from playtime.services.sse import stream_live_query
from playtime.utils.datetime_utils import DateTimeUtils

chat_bp = Blueprint('chat_bp', __name__)


@chat_bp.route('/messages', methods=['POST'])
@jwt_required()
def send_message():
    """실시간 채팅방에 메시지를 보냅니다. (답장 가능)"""
    chat_service = current_app.services['chat']
    user_id = get_jwt_identity()
    try:
        data = ChatSendSchema().load(request.get_json() or {})
        message = chat_service.send_message(user_id, data['message'],
                                            reply_to_message_id=data.get('reply_to_message_id'))
        return jsonify(ChatMessageResponseSchema().dump(message)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": str(e)}), 400
    except PlaytimeError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"채팅 메시지 전송 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "MESSAGE_SEND_FAILED", "message": "메시지 전송에 실패했습니다."}), 500


@chat_bp.route('/messages', methods=['GET'])
def list_messages():
    """최근 채팅 메시지 (오래된 것부터). ?before=<ISO 시각>이면 그 이전 메시지"""
    chat_service = current_app.services['chat']
    limit = request.args.get('limit', 100, type=int)
    before = request.args.get('before')
    try:
        before_dt = DateTimeUtils.parse_iso_datetime(before) if before else None
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": str(e)}), 400
    try:
        messages = chat_service.list_recent(limit=max(1, min(limit, 500)), before=before_dt)
        return jsonify({"messages": ChatMessageResponseSchema(many=True).dump(messages)}), 200
    except PlaytimeError as e:
        return e.to_response()


@chat_bp.route('/stream', methods=['GET'])
def stream_messages():
    """채팅 메시지 실시간 구독 (Server-Sent Events)"""
    chat_service = current_app.services['chat']
    return stream_live_query(
        lambda on_update, on_error: chat_service.live_messages(on_update, on_error),
        lambda items: ChatMessageResponseSchema(many=True).dump(items),
    )
