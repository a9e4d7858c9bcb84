"""
대화형 게시물 작성 도우미 패키지

Flask에 의존하지 않는 순수 로직만 포함합니다. (HTTP 노출은 api/chat)
"""

from .conversation import Conversation, Intent, Message, Role
from .draft import Draft
from .errors import (
    CompletionError, InvalidCredentialError, QuotaExceededError,
    DraftValidationError, SessionBusyError
)
from .extraction import ExtractionResult, extract_draft, parse_draft_response
from .sanitizer import sanitize_response
from .session import ChatSession, Notice

__all__ = [
    'Conversation', 'Intent', 'Message', 'Role',
    'Draft',
    'CompletionError', 'InvalidCredentialError', 'QuotaExceededError',
    'DraftValidationError', 'SessionBusyError',
    'ExtractionResult', 'extract_draft', 'parse_draft_response',
    'sanitize_response',
    'ChatSession', 'Notice',
]
