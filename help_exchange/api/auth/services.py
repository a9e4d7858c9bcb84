# help_exchange/api/auth/services.py
import uuid
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import asdict
from flask import Flask
from werkzeug.security import generate_password_hash, check_password_hash

from help_exchange.models.user import User
from help_exchange.services.firestore_service import get_client, ANONYMOUS_NAME
from help_exchange.utils.datetime_utils import DateTimeUtils

class EmailAlreadyExistsError(ValueError):
    """이미 가입된 이메일로 회원가입을 시도한 경우"""

class InvalidCredentialsError(ValueError):
    """이메일 또는 비밀번호가 일치하지 않는 경우"""

class AuthService:
    def __init__(self):
        self.db = None
        self.users_ref = None
        self.revoked_tokens_ref = None
        self.app: Optional[Flask] = None

    def init_app(self, app: Flask, db=None):
        """앱 초기화 과정에서 호출되어 DB 연결 및 앱 컨텍스트를 설정합니다."""
        self.db = get_client(db)
        self.users_ref = self.db.collection('users')
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')
        self.app = app

    # --- 가입 / 로그인 ---
    def _find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        query = self.users_ref.where('email', '==', email).limit(1).stream()
        user_doc = next(iter(query), None)
        return user_doc.to_dict() if user_doc else None

    def _save_user(self, user: User) -> Dict[str, Any]:
        user_data = DateTimeUtils.for_firestore(asdict(user))
        self.users_ref.document(user.user_id).set(user_data)
        return user_data

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        """이메일/비밀번호로 새 사용자를 만듭니다. 이름이 없으면 이메일 앞부분을 사용합니다."""
        email = email.strip().lower()
        if self._find_user_by_email(email):
            raise EmailAlreadyExistsError("이미 가입된 이메일입니다.")

        new_user = User(
            user_id=str(uuid.uuid4()),
            name=(name or "").strip() or email.split('@')[0],
            email=email,
            password_hash=generate_password_hash(password)
        )
        user_data = self._save_user(new_user)
        logging.info(f"신규 사용자 가입 완료 (user_id: {new_user.user_id})")
        return user_data

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        user_data = self._find_user_by_email(email.strip().lower())
        if not user_data or not user_data.get('password_hash'):
            raise InvalidCredentialsError("이메일 또는 비밀번호가 올바르지 않습니다.")
        if not check_password_hash(user_data['password_hash'], password):
            raise InvalidCredentialsError("이메일 또는 비밀번호가 올바르지 않습니다.")
        return user_data

    def sign_in_anonymously(self) -> Dict[str, Any]:
        """이메일 없이 사용할 수 있는 익명 사용자를 만듭니다."""
        new_user = User(user_id=str(uuid.uuid4()), name=ANONYMOUS_NAME, is_anonymous=True)
        user_data = self._save_user(new_user)
        logging.info(f"익명 사용자 생성 (user_id: {new_user.user_id})")
        return user_data

    def get_user(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """로그인한 사용자 문서. 비로그인 또는 문서가 없으면 None."""
        if not user_id:
            return None
        doc = self.users_ref.document(user_id).get()
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def build_identity_claims(user_data: Dict[str, Any]) -> Dict[str, Any]:
        """토큰에 함께 담을 신원 정보"""
        return {
            "name": user_data.get('name'),
            "picture_url": user_data.get('image'),
            "email": user_data.get('email'),
            "is_anonymous": bool(user_data.get('is_anonymous')),
        }

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        try:
            token_data = {
                'revoked_at': DateTimeUtils.now(),
                'expires_at': expires
            }
            self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))
        except Exception as e:
            logging.error(f"Blocklist 토큰 추가 실패 (jti: {jti}): {e}", exc_info=True)
            raise

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload['jti']
        return self.revoked_tokens_ref.document(jti).get().exists

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Access 토큰과 Refresh 토큰을 모두 Blocklist에 추가합니다."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")

auth_service = AuthService()
