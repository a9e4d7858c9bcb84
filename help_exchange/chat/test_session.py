# help_exchange/chat/test_session.py
import json

import pytest

from conftest import ScriptedCompletion
from help_exchange.chat.conversation import Intent, Role
from help_exchange.chat.draft import Draft
from help_exchange.chat.errors import CompletionError, InvalidCredentialError, QuotaExceededError, SessionBusyError
from help_exchange.chat.session import ChatSession, FALLBACK_REPLY, POST_CREATED_REPLY
from help_exchange.core.client_settings import ClientSettings

API_KEY = "sk-valid-key-123"


def _codes(session):
    return [n.code for n in session.drain_notices()]


def test_select_intent_adds_intent_message_and_sanitized_reply():
    completion = ScriptedCompletion(["assistant: What kind of help do you need?"])
    session = ChatSession(completion, ClientSettings(api_key=API_KEY))

    reply = session.select_intent(Intent.NEED_HELP)

    assert reply == "What kind of help do you need?"
    assert [(m.role, m.text) for m in session.conversation.messages] == [
        (Role.USER, "I need help with something"),
        (Role.ASSISTANT, "What kind of help do you need?"),
    ]
    assert session.conversation.intent == Intent.NEED_HELP
    assert completion.api_keys == [API_KEY]


def test_empty_model_output_uses_fallback_reply():
    session = ChatSession(ScriptedCompletion(["   "]), ClientSettings(api_key=API_KEY))
    assert session.select_intent(Intent.SEARCH) == FALLBACK_REPLY
    assert session.conversation.messages[-1].text == FALLBACK_REPLY


def test_missing_api_key_emits_notice_without_calling_model():
    completion = ScriptedCompletion(["unused"])
    session = ChatSession(completion, ClientSettings())

    assert session.send_message("hello there") is None
    assert _codes(session) == ["NO_API_KEY"]
    assert completion.prompts == []


def test_invalid_credential_clears_stored_key(tmp_path):
    path = tmp_path / "settings.json"
    settings = ClientSettings(api_key=API_KEY, path=str(path))
    settings.save()
    session = ChatSession(ScriptedCompletion([InvalidCredentialError("API key not valid")]), settings)

    assert session.send_message("hello there") is None

    assert _codes(session) == ["INVALID_API_KEY"]
    assert not settings.has_api_key
    assert json.loads(path.read_text(encoding="utf-8"))["api_key"] is None


@pytest.mark.parametrize("error, code", [
    (QuotaExceededError("quota"), "QUOTA_EXCEEDED"),
    (CompletionError("boom"), "API_ERROR"),
])
def test_other_completion_failures_keep_key(error, code):
    settings = ClientSettings(api_key=API_KEY)
    session = ChatSession(ScriptedCompletion([error]), settings)

    assert session.send_message("hello there") is None
    assert _codes(session) == [code]
    assert settings.api_key == API_KEY
    # 실패한 턴의 사용자 메시지는 남아 있어 다시 시도할 수 있습니다.
    assert session.conversation.messages[-1].text == "hello there"


def test_busy_session_rejects_second_request():
    session = ChatSession(ScriptedCompletion(["ok"]), ClientSettings(api_key=API_KEY))
    session.is_busy = True

    with pytest.raises(SessionBusyError):
        session.send_message("hello there")


def test_review_without_post_intent_emits_notice():
    session = ChatSession(ScriptedCompletion(), ClientSettings(api_key=API_KEY))
    session.conversation.intent = Intent.SEARCH

    assert session.review_post() is None
    assert _codes(session) == ["CANNOT_CREATE_POST_WITHOUT_INTENT"]


def test_review_with_unparseable_response_returns_editable_empty_draft():
    session = ChatSession(ScriptedCompletion(["no json here"]), ClientSettings(api_key=API_KEY))
    session.conversation.intent = Intent.OFFER_HELP
    session.conversation.add_user("I can teach math")

    draft = session.review_post()

    assert draft == Draft.empty("helpOffered")
    assert _codes(session) == ["EXTRACTION_FAILED"]

    edited = session.edit_draft(title="Math lessons", description="Free lessons", location="Jeddah", contact_info="0538765432")
    assert edited.is_complete()


def test_full_flow_submits_post_and_clears_draft():
    extracted = json.dumps({
        "title": "Help moving furniture", "description": "Need two people on Friday",
        "location": "Riyadh", "contactInfo": "0555123456", "tags": ["moving"],
    })
    submitted = []

    def submit_post(payload):
        submitted.append(payload)
        return "post-1"

    session = ChatSession(ScriptedCompletion(["Where?", "Thanks!", extracted]), ClientSettings(api_key=API_KEY),
                          submit_post=submit_post)
    session.select_intent(Intent.NEED_HELP)
    session.send_message("Moving furniture in Riyadh, 0555123456")
    session.review_post()

    assert session.submit_draft() == "post-1"
    assert submitted[0]["type"] == "helpNeeded"
    assert submitted[0]["images"] == []
    assert session.draft is None
    assert session.conversation.messages[-1].text == POST_CREATED_REPLY
    assert _codes(session) == ["POST_CREATED"]


def test_submit_incomplete_draft_does_not_call_submitter():
    calls = []
    session = ChatSession(ScriptedCompletion(), ClientSettings(api_key=API_KEY), submit_post=calls.append)

    assert session.submit_draft(Draft(type="helpNeeded", title="t", description="d", location="")) is None
    assert _codes(session) == ["MISSING_REQUIRED_FIELDS"]
    assert calls == []


def test_submit_failure_keeps_draft():
    def failing_submit(payload):
        raise RuntimeError("db down")

    session = ChatSession(ScriptedCompletion(), ClientSettings(api_key=API_KEY), submit_post=failing_submit)
    session.draft = Draft(type="helpNeeded", title="t", description="d", location="l", contact_info="c")

    assert session.submit_draft() is None
    assert _codes(session) == ["SUBMIT_FAILED"]
    assert session.draft is not None
    assert not session.is_busy
