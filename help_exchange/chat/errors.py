# help_exchange/chat/errors.py
from typing import List


class CompletionError(Exception):
    """완성(LLM) API 호출 실패. 원인을 특정할 수 없는 일시적/기타 오류."""


class InvalidCredentialError(CompletionError):
    """API 키가 유효하지 않음. 저장된 키를 지우고 다시 입력받아야 합니다."""


class QuotaExceededError(CompletionError):
    """API 사용량 한도 초과."""


class SessionBusyError(RuntimeError):
    """같은 세션에서 이전 요청이 아직 처리 중입니다."""


class DraftValidationError(ValueError):
    """필수 항목이 비어 있는 초안을 제출하려는 경우."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(f"필수 항목이 비어 있습니다: {', '.join(self.missing_fields)}")
