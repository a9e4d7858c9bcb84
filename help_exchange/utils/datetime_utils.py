# help_exchange/utils/datetime_utils.py
"""
시간 관리 유틸리티

Firestore에 저장되는 모든 시각은 timezone-aware UTC datetime으로 통일합니다.
"""

from datetime import datetime, date, timezone
from typing import Any, Optional, Union


class DateTimeUtils:
    """프로젝트 전체에서 사용하는 시간 관련 헬퍼 모음"""

    @staticmethod
    def now() -> datetime:
        """현재 UTC 시각 (timezone-aware)"""
        return datetime.now(timezone.utc)

    @staticmethod
    def to_utc(value: Union[datetime, date]) -> datetime:
        """datetime/date를 UTC datetime으로 정규화합니다. naive 값은 UTC로 간주합니다."""
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @staticmethod
    def parse_iso(value: str) -> datetime:
        """ISO 8601 문자열을 UTC datetime으로 파싱합니다. ('Z' 접미사 지원)"""
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        return DateTimeUtils.to_utc(datetime.fromisoformat(value))

    @staticmethod
    def to_iso(value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return DateTimeUtils.to_utc(value).isoformat()

    @staticmethod
    def for_firestore(data: Any) -> Any:
        """
        Firestore 저장 전 데이터를 재귀적으로 변환합니다.
        - date → UTC datetime
        - naive datetime → UTC datetime
        """
        if isinstance(data, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in data.items()}
        if isinstance(data, list):
            return [DateTimeUtils.for_firestore(v) for v in data]
        if isinstance(data, (datetime, date)):
            return DateTimeUtils.to_utc(data)
        return data


# 간편 함수
now = DateTimeUtils.now
parse_iso = DateTimeUtils.parse_iso
to_iso = DateTimeUtils.to_iso
for_firestore = DateTimeUtils.for_firestore
