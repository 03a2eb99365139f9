# playtime/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from marshmallow import ValidationError

from playtime.api.auth.schemas import (
    SignUpSchema,
    SignInSchema,
    SocialLoginSchema,
    LogoutRequestSchema,
    AuthResponseSchema,
)
from playtime.core.errors import AuthError

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/signup', methods=['POST'])
def sign_up():
    """이메일/비밀번호 회원가입. 성공 시 바로 로그인 상태가 됩니다."""
    auth_service = current_app.services['auth']
    try:
        data = SignUpSchema().load(request.get_json() or {})
        result = auth_service.sign_up(data['email'], data['password'], data.get('display_name'))
        return jsonify(AuthResponseSchema().dump(result)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"회원가입 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/login', methods=['POST'])
def sign_in():
    """이메일/비밀번호 로그인"""
    auth_service = current_app.services['auth']
    try:
        data = SignInSchema().load(request.get_json() or {})
        result = auth_service.sign_in(data['email'], data['password'])
        return jsonify(AuthResponseSchema().dump(result)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"로그인 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/social', methods=['POST'])
def social_login():
    """소셜 로그인 및 회원가입을 처리하는 엔드포인트입니다."""
    auth_service = current_app.services['auth']
    try:
        data = SocialLoginSchema().load(request.get_json() or {})
        if data.get('id_token'):
            result = auth_service.sign_in_with_id_token(data['id_token'])
        elif data.get('auth_code'):
            result = auth_service.sign_in_with_google_code(data['auth_code'])
        else:
            return jsonify({"error_code": "VALIDATION_ERROR",
                            "details": {"id_token": ["id_token 또는 auth_code가 필요합니다."]}}), 400
        return jsonify(AuthResponseSchema().dump(result)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return e.to_response()
    except Exception as e:
        logging.error(f"소셜 로그인 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)  # Refresh Token만 허용하는 데코레이터
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)
    return jsonify(access_token=new_access_token), 200


# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 전달받은 Access/Refresh 토큰을 무효화 목록에 추가합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # 만료된 토큰도 무효화할 수 있도록 만료 검사는 생략합니다.
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(decoded_access['jti'], decoded_access['exp'],
                                 decoded_refresh['jti'], decoded_refresh['exp'])
        return jsonify({"message": "로그아웃 되었습니다."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT 해독 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422
    except Exception as e:
        logging.error(f"로그아웃 처리 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500
