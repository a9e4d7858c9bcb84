# help_exchange/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
    get_jwt
)
from marshmallow import ValidationError

from help_exchange.api.auth.schemas import SignUpSchema, SignInSchema, LogoutRequestSchema, UserInfoSchema
from .services import auth_service, EmailAlreadyExistsError, InvalidCredentialsError

auth_bp = Blueprint('auth_bp', __name__)

def _token_response(user_data: dict, status: int = 200):
    """Access/Refresh 토큰을 발급하고 사용자 정보와 함께 응답합니다."""
    identity = user_data['user_id']
    claims = auth_service.build_identity_claims(user_data)
    return jsonify({
        "access_token": create_access_token(identity=identity, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=identity, additional_claims=claims),
        "user_id": identity,
        "user_info": UserInfoSchema().dump(user_data)
    }), status

@auth_bp.route('/signup', methods=['POST'])
def sign_up():
    """이메일/비밀번호 회원가입"""
    try:
        data = SignUpSchema().load(request.get_json() or {})
        user_data = auth_service.sign_up(data['email'], data['password'], data.get('name'))
        return _token_response(user_data, 201)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except EmailAlreadyExistsError as e:
        return jsonify({"error_code": "EMAIL_ALREADY_EXISTS", "message": str(e)}), 409

@auth_bp.route('/signin', methods=['POST'])
def sign_in():
    """이메일/비밀번호 로그인"""
    try:
        data = SignInSchema().load(request.get_json() or {})
        user_data = auth_service.sign_in(data['email'], data['password'])
        return _token_response(user_data)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except InvalidCredentialsError as e:
        return jsonify({"error_code": "INVALID_CREDENTIALS", "message": str(e)}), 401

@auth_bp.route('/anonymous', methods=['POST'])
def sign_in_anonymously():
    """익명 로그인. 매번 새 익명 사용자를 만듭니다."""
    user_data = auth_service.sign_in_anonymously()
    return _token_response(user_data, 201)

# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True) # Refresh Token만 허용하는 데코레이터
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    current_user_id = get_jwt_identity()
    user_data = auth_service.get_user(current_user_id) or {}
    new_access_token = create_access_token(
        identity=current_user_id,
        additional_claims=auth_service.build_identity_claims(user_data)
    )
    return jsonify(access_token=new_access_token), 200

# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 전달받은 Access/Refresh 토큰을 무효화 목록에 추가합니다."""
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        # 만료된 토큰도 로그아웃할 수 있도록 PyJWT로 직접 해독합니다.
        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(decoded_access['jti'], decoded_access['exp'], decoded_refresh['jti'], decoded_refresh['exp'])
        return jsonify({"message": "로그아웃 되었습니다."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT 해독 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422
    except Exception as e:
        logging.error(f"로그아웃 처리 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500

# --- 현재 사용자 조회 ---
@auth_bp.route('/me', methods=['GET'])
@jwt_required(optional=True)
def get_logged_in_user():
    """로그인한 사용자 문서. 비로그인이면 user: null"""
    user_data = auth_service.get_user(get_jwt_identity())
    return jsonify({"user": UserInfoSchema().dump(user_data) if user_data else None}), 200

@auth_bp.route('/identity', methods=['GET'])
@jwt_required(optional=True)
def get_identity():
    """토큰에 담긴 신원 정보. 비로그인이면 identity: null"""
    subject = get_jwt_identity()
    if not subject:
        return jsonify({"identity": None}), 200

    claims = get_jwt()
    return jsonify({"identity": {
        "subject": subject,
        "name": claims.get('name'),
        "picture_url": claims.get('picture_url'),
        "email": claims.get('email'),
    }}), 200
