# help_exchange/chat/conversation.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from help_exchange.models.post import PostType

class Intent(str, Enum):
    """사용자가 대화 시작 시 고르는 4개의 버튼에 대응합니다."""
    NEED_HELP = "need_help"
    OFFER_HELP = "offer_help"
    SEARCH = "search"
    SETTINGS = "settings"

    @property
    def post_type(self) -> Optional[PostType]:
        """게시물을 만들 수 있는 의도만 게시물 종류로 매핑됩니다."""
        return _INTENT_POST_TYPES.get(self)

    @property
    def can_create_post(self) -> bool:
        return self.post_type is not None

_INTENT_POST_TYPES = {
    Intent.NEED_HELP: PostType.HELP_NEEDED,
    Intent.OFFER_HELP: PostType.HELP_OFFERED,
}

# 클라이언트가 번역된 문구를 보내지 않을 때 사용하는 기본 의도 메시지
DEFAULT_INTENT_MESSAGES = {
    Intent.NEED_HELP: "I need help with something",
    Intent.OFFER_HELP: "I want to offer help to others",
    Intent.SEARCH: "I want to search for something",
    Intent.SETTINGS: "I have a question about the app settings",
}

class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

@dataclass
class Message:
    role: Role
    text: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "text": self.text}

# 언어 샘플로 인정할 최소 길이
MIN_LANGUAGE_SAMPLE_LENGTH = 5

@dataclass
class Conversation:
    """
    클라이언트 세션 동안만 유지되는 대화 상태.
    저장되지 않으며 게시물 제출 또는 화면 이탈 시 폐기됩니다.
    """
    messages: List[Message] = field(default_factory=list)
    intent: Optional[Intent] = None
    language: str = "en"
    language_sample: Optional[str] = None

    def add_user(self, text: str) -> Message:
        message = Message(Role.USER, text)
        self.messages.append(message)
        return message

    def add_assistant(self, text: str) -> Message:
        message = Message(Role.ASSISTANT, text)
        self.messages.append(message)
        return message

    def note_language_sample(self, text: str) -> None:
        """아직 쓸만한 언어 샘플이 없으면 사용자 문장을 샘플로 기억합니다."""
        if self.language_sample and len(self.language_sample) >= MIN_LANGUAGE_SAMPLE_LENGTH:
            return
        candidate = (text or "").strip()
        if len(candidate) >= MIN_LANGUAGE_SAMPLE_LENGTH:
            self.language_sample = candidate

    def transcript(self) -> str:
        """system 메시지를 제외한 대화 기록을 'User: ...' / 'Assistant: ...' 형식으로 이어 붙입니다."""
        lines = []
        for message in self.messages:
            if message.role == Role.SYSTEM:
                continue
            label = "User" if message.role == Role.USER else "Assistant"
            lines.append(f"{label}: {message.text}")
        return "\n\n".join(lines)

    def has_user_turns(self) -> bool:
        return any(m.role == Role.USER for m in self.messages)
