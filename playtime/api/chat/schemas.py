# playtime/api/chat/schemas.py
from marshmallow import Schema, fields, validate


class ChatSendSchema(Schema):
    """POST /api/chat/messages 요청 본문"""
    message = fields.Str(required=True, validate=validate.Length(min=1, max=500, error="메시지는 1~500자 사이여야 합니다."))
    reply_to_message_id = fields.Str(load_default=None)


class ChatReplySchema(Schema):
    message_id = fields.Str(required=True)
    user_name = fields.Str(allow_none=True)
    excerpt = fields.Str(allow_none=True)


class ChatMessageResponseSchema(Schema):
    id = fields.Str(dump_only=True)
    user_id = fields.Str(required=True)
    user_name = fields.Str(required=True)
    message = fields.Str(required=True)
    timestamp = fields.DateTime(allow_none=True)
    reply_to = fields.Nested(ChatReplySchema, allow_none=True)
