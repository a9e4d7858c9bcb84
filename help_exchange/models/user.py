# help_exchange/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any

from help_exchange.utils.datetime_utils import DateTimeUtils

THEMES = ("light", "dark", "system")

@dataclass
class Preferences:
    """사용자 문서 내부에 저장될 환경설정 정보."""
    language: Optional[str] = None
    theme: Optional[str] = None
    notifications_enabled: Optional[bool] = None
    profile_visible: Optional[bool] = None

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    email, is_anonymous, password_hash는 인증 계층이 관리합니다.
    """
    user_id: str
    name: str
    email: Optional[str] = None
    is_anonymous: bool = False
    password_hash: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    preferences: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
