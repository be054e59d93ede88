# meydan/api/auth/services.py
import logging
from datetime import datetime, timezone
from typing import Optional

import requests
from firebase_admin import firestore, auth as firebase_auth
from flask import Flask

from meydan.core.context import Viewer
from meydan.core.errors import AuthError, describe_error
from meydan.utils.datetime_utils import DateTimeUtils

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class AuthService:
    """
    Firebase Authentication 연동과 로그아웃 토큰 관리를 담당합니다.
    이메일/비밀번호 로그인은 공개 웹 API 키로 Identity Toolkit REST API를 호출합니다.
    """

    def __init__(self):
        self.db = None
        self.revoked_tokens_ref = None
        self.web_api_key: Optional[str] = None
        self.http = requests.Session()

    def init_app(self, app: Flask, db=None):
        """앱 초기화 과정에서 호출되어 DB 연결과 공개 API 키를 설정합니다."""
        self.db = db or firestore.client()
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')
        self.web_api_key = app.config.get('FIREBASE_WEB_API_KEY')

    # --- Identity Toolkit ---
    def _identity_toolkit(self, endpoint: str, email: str, password: str) -> str:
        if not self.web_api_key:
            raise AuthError("FIREBASE_WEB_API_KEY가 설정되지 않았습니다.")
        try:
            response = self.http.post(
                f"{IDENTITY_TOOLKIT_URL}/{endpoint}",
                params={"key": self.web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logging.error(f"인증 서비스 호출 실패 ({endpoint}): {e}")
            raise AuthError(describe_error(e)) from e

        if not response.ok:
            message = body.get('error', {}).get('message') or response.reason
            logging.warning(f"인증 실패 ({endpoint}): {message}")
            raise AuthError(message)
        return body['idToken']

    def sign_in_with_password(self, email: str, password: str) -> str:
        """이메일/비밀번호로 로그인하고 Firebase ID 토큰을 반환합니다."""
        return self._identity_toolkit("accounts:signInWithPassword", email, password)

    def sign_up(self, email: str, password: str) -> str:
        """새 계정을 만들고 Firebase ID 토큰을 반환합니다."""
        return self._identity_toolkit("accounts:signUp", email, password)

    def verify_id_token(self, id_token: str) -> Viewer:
        """Firebase ID 토큰을 검증하고 현재 사용자를 반환합니다."""
        try:
            decoded = firebase_auth.verify_id_token(id_token)
        except Exception as e:
            logging.warning(f"ID 토큰 검증 실패: {e}")
            raise AuthError(describe_error(e)) from e
        return Viewer(user_id=decoded['uid'], email=decoded.get('email'))

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """로그아웃한 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        try:
            self.revoked_tokens_ref.document(jti).set({
                'revoked_at': DateTimeUtils.now(),
                'expires_at': expires,
            })
        except Exception as e:
            logging.error(f"Blocklist 토큰 추가 실패 (jti: {jti}): {e}")

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        doc = self.revoked_tokens_ref.document(jwt_payload['jti']).get()
        return doc.exists

    def logout(self, jwt_payload: dict):
        expires = datetime.fromtimestamp(jwt_payload['exp'], tz=timezone.utc)
        self.add_token_to_blocklist(jwt_payload['jti'], expires)


auth_service = AuthService()
