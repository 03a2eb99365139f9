# playtime/core/security.py
from flask import Flask, jsonify
from flask_jwt_extended import JWTManager


def init_jwt(app: Flask, auth_service) -> JWTManager:
    """
    JWTManager를 초기화하고 토큰 무효화(Blocklist) 콜백을 등록합니다.
    로그아웃된 토큰의 jti는 Firestore 'revoked_tokens'에 저장되어 있습니다.
    """
    jwt = JWTManager(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload: dict) -> bool:
        return auth_service.is_token_revoked(jwt_payload)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_EXPIRED", "message": "토큰이 만료되었습니다. 다시 로그인해주세요."}), 401

    @jwt.unauthorized_loader
    def missing_token_callback(reason: str):
        return jsonify({"error_code": "LOGIN_REQUIRED", "message": "로그인이 필요합니다."}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason: str):
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_REVOKED", "message": "로그아웃된 토큰입니다. 다시 로그인해주세요."}), 401

    return jwt
