# help_exchange/chat/session.py
"""
대화형 게시물 작성 흐름을 묶는 세션 객체.

사용자 메시지 → 대화 상태 추가 → 프롬프트 구성 → 완성 API → 응답 정리 → 대화 상태 추가
검토 요청 시: 대화 상태 → 초안 추출 → 검토/수정 → 게시물 제출
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from help_exchange.chat.conversation import Conversation, Intent, DEFAULT_INTENT_MESSAGES
from help_exchange.chat.draft import Draft
from help_exchange.chat.errors import (
    CompletionError, DraftValidationError, InvalidCredentialError, QuotaExceededError, SessionBusyError
)
from help_exchange.chat.extraction import extract_draft
from help_exchange.chat.prompts import build_opening_prompt, build_turn_prompt
from help_exchange.chat.sanitizer import sanitize_response
from help_exchange.core.client_settings import ClientSettings

FALLBACK_REPLY = "Sorry, I couldn't generate a response."
POST_CREATED_REPLY = "Your post has been created successfully! Is there anything else I can help you with?"


@dataclass
class Notice:
    """사용자에게 토스트로 보여줄 알림."""
    level: str  # 'error' | 'info' | 'success'
    code: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level, "code": self.code, "message": self.message}


class ChatSession:
    """
    한 클라이언트 세션의 대화 상태와 진행 중 플래그를 관리합니다.
    완성 API 실패는 예외 대신 Notice로 변환되어 쌓이고, 사용자는 언제든 다시 시도할 수 있습니다.
    """

    def __init__(self, completion, settings: ClientSettings, conversation: Optional[Conversation] = None,
                 submit_post: Optional[Callable[[Dict[str, Any]], str]] = None):
        self.completion = completion
        self.settings = settings
        self.conversation = conversation or Conversation()
        self.submit_post = submit_post
        self.draft: Optional[Draft] = None
        self.notices: List[Notice] = []
        self.is_busy = False

    # --- 내부 헬퍼 ---
    def _notify(self, level: str, code: str, message: str) -> None:
        self.notices.append(Notice(level, code, message))

    def drain_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    @contextmanager
    def _busy(self):
        if self.is_busy:
            raise SessionBusyError("이전 요청이 아직 처리 중입니다.")
        self.is_busy = True
        try:
            yield
        finally:
            self.is_busy = False

    def _require_api_key(self) -> bool:
        if self.settings.has_api_key:
            return True
        self._notify("error", "NO_API_KEY", "먼저 API 키를 입력해주세요.")
        return False

    def _complete(self, prompt: str) -> Optional[str]:
        """완성 API 호출. 실패 종류별로 알림을 남기고 None을 반환합니다."""
        try:
            return self.completion.complete(prompt, api_key=self.settings.api_key)
        except CompletionError as e:
            self._handle_completion_failure(e)
            return None

    def _handle_completion_failure(self, error: CompletionError) -> None:
        if isinstance(error, InvalidCredentialError):
            # 잘못된 키는 지우고 다시 입력받도록 합니다.
            self.settings.clear_api_key()
            self.settings.save()
            self._notify("error", "INVALID_API_KEY", "API 키가 유효하지 않습니다. 새 키를 입력해주세요.")
        elif isinstance(error, QuotaExceededError):
            self._notify("error", "QUOTA_EXCEEDED", "API 사용량 한도를 초과했습니다. 잠시 후 다시 시도해주세요.")
        else:
            logging.error(f"완성 API 요청 실패: {error}")
            self._notify("error", "API_ERROR", "응답 생성 중 오류가 발생했습니다.")

    def _reply_with(self, prompt: str) -> Optional[str]:
        raw = self._complete(prompt)
        if raw is None:
            return None
        reply = sanitize_response(raw) or FALLBACK_REPLY
        self.conversation.add_assistant(reply)
        return reply

    # --- 대화 ---
    def select_intent(self, intent: Intent, intent_message: Optional[str] = None) -> Optional[str]:
        """의도 버튼 선택. 의도 문구를 사용자 메시지로 남기고 첫 질문을 생성합니다."""
        message = intent_message or DEFAULT_INTENT_MESSAGES[intent]
        self.conversation.intent = intent
        self.conversation.add_user(message)
        self.conversation.language_sample = message

        if not self._require_api_key():
            return None
        with self._busy():
            prompt = build_opening_prompt(intent, self.conversation.language, message)
            return self._reply_with(prompt)

    def send_message(self, message: str) -> Optional[str]:
        if not self._require_api_key():
            return None
        with self._busy():
            self.conversation.note_language_sample(message)
            self.conversation.add_user(message)
            prompt = build_turn_prompt(self.conversation, message)
            return self._reply_with(prompt)

    # --- 초안 검토 및 제출 ---
    def review_post(self) -> Optional[Draft]:
        """대화에서 초안을 추출합니다. 파싱에 실패해도 빈 초안을 돌려줘 직접 입력할 수 있게 합니다."""
        intent = self.conversation.intent
        if intent is None or not intent.can_create_post:
            self._notify("error", "CANNOT_CREATE_POST_WITHOUT_INTENT", "도움 요청 또는 도움 제공을 먼저 선택해주세요.")
            return None
        if not self._require_api_key():
            return None

        with self._busy():
            try:
                result = extract_draft(self.completion, self.conversation, intent, api_key=self.settings.api_key)
            except CompletionError as e:
                self._handle_completion_failure(e)
                return None

        if not result.succeeded:
            self._notify("error", "EXTRACTION_FAILED", "대화에서 게시물 정보를 추출하지 못했습니다. 직접 입력해주세요.")
        self.draft = result.draft
        return self.draft

    def edit_draft(self, **edits: Any) -> Draft:
        if self.draft is None:
            raise ValueError("수정할 초안이 없습니다.")
        self.draft = self.draft.with_edits(**edits)
        return self.draft

    def cancel_draft(self) -> None:
        self.draft = None

    def submit_draft(self, draft: Optional[Draft] = None) -> Optional[str]:
        """
        필수 항목을 확인한 뒤 게시물을 생성합니다.
        성공하면 생성된 게시물 ID를 반환하고 초안을 비웁니다.
        """
        draft = draft or self.draft
        if draft is None:
            self._notify("error", "NO_DRAFT", "제출할 초안이 없습니다.")
            return None
        try:
            draft.validate()
        except DraftValidationError as e:
            self._notify("error", "MISSING_REQUIRED_FIELDS", str(e))
            return None
        if self.submit_post is None:
            raise RuntimeError("게시물 제출 함수가 설정되지 않았습니다.")

        with self._busy():
            try:
                post_id = self.submit_post(draft.to_post_payload())
            except Exception as e:
                logging.error(f"초안 게시물 제출 실패: {e}", exc_info=True)
                self._notify("error", "SUBMIT_FAILED", "게시물 제출에 실패했습니다.")
                return None

        self.draft = None
        self.conversation.add_assistant(POST_CREATED_REPLY)
        self._notify("success", "POST_CREATED", "게시물이 생성되었습니다.")
        return post_id
