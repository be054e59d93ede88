# meydan/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt, get_jwt_identity
from marshmallow import ValidationError

from meydan.api.auth.schemas import CredentialsSchema, IdTokenSchema
from meydan.api.users.schemas import ProfileSchema
from meydan.core.context import Viewer
from meydan.core.errors import AuthError
from .services import auth_service

auth_bp = Blueprint('auth_bp', __name__)


def _start_session(viewer: Viewer):
    """컨텍스트를 열고(피드 집계 + 변경 피드 구독) 액세스 토큰을 발급합니다."""
    context = current_app.services['sessions'].open(viewer)
    access_token = create_access_token(identity=viewer.user_id, additional_claims={"email": viewer.email})
    return jsonify({
        "status": "signed_in",
        "access_token": access_token,
        "user_id": viewer.user_id,
        "feed_status": context.status.value,
        "profile": ProfileSchema().dump(context.profile) if context.profile else None,
    }), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    """이메일/비밀번호 로그인. 인증 서비스의 오류 메시지는 그대로 전달합니다."""
    try:
        data = CredentialsSchema().load(request.get_json())
        id_token = auth_service.sign_in_with_password(data['email'], data['password'])
        return _start_session(auth_service.verify_id_token(id_token))
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return jsonify({"error_code": "AUTHENTICATION_FAILED", "message": e.message}), 401


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """회원가입 후 바로 세션을 시작합니다."""
    try:
        data = CredentialsSchema().load(request.get_json())
        id_token = auth_service.sign_up(data['email'], data['password'])
        return _start_session(auth_service.verify_id_token(id_token))
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return jsonify({"error_code": "SIGNUP_FAILED", "message": e.message}), 400


@auth_bp.route('/session', methods=['POST'])
def create_session():
    """이미 Firebase ID 토큰을 가진 클라이언트의 세션을 시작합니다."""
    try:
        data = IdTokenSchema().load(request.get_json())
        return _start_session(auth_service.verify_id_token(data['id_token']))
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthError as e:
        return jsonify({"error_code": "INVALID_ID_TOKEN", "message": e.message}), 401


@auth_bp.route('/session', methods=['GET'])
@jwt_required(optional=True)
def get_session():
    """세션이 없으면 로그인 화면을 띄우도록 signed_out 을 반환합니다."""
    user_id = get_jwt_identity()
    if not user_id:
        return jsonify({"status": "signed_out"}), 200

    context = current_app.services['sessions'].get_or_open(Viewer(user_id=user_id, email=get_jwt().get('email')))
    return jsonify({
        "status": "signed_in",
        "user_id": user_id,
        "feed_status": context.status.value,
        "profile": ProfileSchema().dump(context.profile) if context.profile else None,
    }), 200


@auth_bp.route('/session', methods=['DELETE'])
@jwt_required()
def delete_session():
    """로그아웃. 토큰을 무효화하고 변경 피드 구독을 해제합니다."""
    user_id = get_jwt_identity()
    try:
        auth_service.logout(get_jwt())
        current_app.services['sessions'].close(user_id)
        return jsonify({"status": "signed_out"}), 200
    except Exception as e:
        logging.error(f"로그아웃 처리 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500
