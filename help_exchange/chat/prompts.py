# help_exchange/chat/prompts.py
"""
대화형 게시물 작성 도우미의 프롬프트 구성 모듈.

모든 함수는 순수 문자열 조립이며 부수효과가 없습니다.
"""
from typing import Optional

from help_exchange.chat.conversation import Conversation, Intent

# 첫 턴에 언어 샘플이 없을 때 대신 사용하는 환영 문구
WELCOME_MESSAGE = (
    "Hello! I'm your assistant. I can help you ask for help, offer help to others, "
    "search for posts, or answer questions about the app. What would you like to do?"
)

_NO_ROLE_LABELS = (
    'IMPORTANT: Your response should be DIRECT and should NOT include prefixes like '
    '"assistant:" or "user:" or repeat any part of the conversation history.'
)

_INTENT_DESCRIPTIONS = {
    Intent.NEED_HELP: "need help with something",
    Intent.OFFER_HELP: "want to offer help to others",
    Intent.SEARCH: "want to search for something",
}

_OPENING_GUIDANCE = {
    Intent.NEED_HELP: """Be direct and brief. Ask only the most essential questions.

Start with a simple question about what specific type of help they need.

The key information we'll eventually need is:
- A description of the help they need
- The location where help is needed
- How they can be contacted

But don't ask for all of this at once - ask one essential question at a time and focus on understanding their need first.""",
    Intent.OFFER_HELP: """Be direct and brief. Ask only the most essential questions.

Start by asking what specific help they can provide.

Eventually, we'll need to know:
- A description of the help they can provide
- Their location
- Contact information

But ask one essential question at a time and keep the conversation flowing naturally.""",
    Intent.SEARCH: """Ask briefly and directly what they're looking for within the app.

Keep your response short and to the point. Avoid asking multiple follow-up questions.""",
}

_TURN_GUIDANCE = {
    Intent.NEED_HELP: """You're helping someone describe what help they need.

IMPORTANT: Be brief and direct. Ask one essential question at a time.

If their description is clear enough, acknowledge it and move on.
Only ask for further details if absolutely necessary.

The essential information to gather eventually is:
- A description of the help they need
- The location where help is needed
- How they can be contacted

Once this information is provided, remind the user they can click the "Review & Create Post" button.""",
    Intent.OFFER_HELP: """You're helping someone describe what help they can offer. Be brief and direct.

Ask one essential question at a time. Gather only these essential pieces of information:
- A description of the help they can provide
- The location where they can offer help
- How they can be contacted

Once this information is provided, remind the user about the "Review & Create Post" button.""",
    Intent.SEARCH: """You're helping someone search for posts WITHIN THIS APP. Be direct and avoid asking multiple follow-up questions.

DO NOT perform web searches or provide general information outside the app.
Remind them they can use the main Feed tab for more detailed filtering options.""",
}

_SETTINGS_OPENING = "How can I assist you today? Please be specific about what you need help with."
_SETTINGS_TURN = "Be concise and helpful regarding app settings and functions."


def _language_rules(language: str, sample: str, sample_label: str) -> str:
    return (
        f'VERY IMPORTANT: The user\'s language is "{language}". {sample_label}: "{sample}".\n'
        "You MUST respond in the same language as the user's message (e.g., Arabic, English, Spanish, etc.).\n"
        "Use a standard, formal version of that language - do NOT attempt to mimic slang, "
        "dialect, or informal speech patterns."
    )


def build_opening_prompt(intent: Intent, language: str, sample: Optional[str] = None) -> str:
    """의도 선택 직후 첫 질문을 생성하기 위한 프롬프트. 샘플이 비어 있으면 환영 문구를 씁니다."""
    language_sample = sample.strip() if sample and sample.strip() else WELCOME_MESSAGE
    description = _INTENT_DESCRIPTIONS.get(intent, "have a question")
    guidance = _OPENING_GUIDANCE.get(intent, _SETTINGS_OPENING)

    return "\n\n".join([
        f"You are a helpful assistant in a charity app. The user has indicated they {description}.",
        _NO_ROLE_LABELS,
        _language_rules(language, language_sample, "Their last message was"),
        guidance,
        "Use a friendly but concise tone. No need to introduce yourself - just ask a simple question.",
    ])


def build_turn_prompt(conversation: Conversation, message: str) -> str:
    """
    이어지는 대화 턴의 프롬프트.
    conversation에는 이번 사용자 메시지가 이미 추가되어 있어야 합니다.
    """
    sample = message.strip() if message and message.strip() else (conversation.language_sample or WELCOME_MESSAGE)
    guidance = _TURN_GUIDANCE.get(conversation.intent, _SETTINGS_TURN)

    instructions = "\n\n".join([
        "You are a helpful assistant in a charity app.",
        _NO_ROLE_LABELS,
        _language_rules(conversation.language, sample, "Their current message is"),
        guidance,
    ])
    return f"{instructions}\n\nConversation history:\n{conversation.transcript()}\n\nAssistant:"


def build_extraction_prompt(conversation: Conversation, intent: Intent) -> str:
    """대화 기록에서 게시물 초안 JSON을 추출하기 위한 프롬프트."""
    if not intent.can_create_post:
        raise ValueError(f"'{intent.value}' 의도로는 게시물을 만들 수 없습니다.")

    is_request = intent == Intent.NEED_HELP
    goal = "request help" if is_request else "offer help"
    noun = "request" if is_request else "offer"
    what = "is needed" if is_request else "is being offered"
    language = conversation.language

    return f"""System: Analyze the following conversation transcript from the Charity Connect app. The user's intent is to {goal}.
Extract the information needed to create a post.

The conversation is in language: {language}

Conversation Transcript:
{conversation.transcript()}

Based ONLY on the conversation above, generate a JSON object with the following fields:
- "title": A concise, relevant title summarizing the {noun} (infer this if not explicitly stated, max 80 chars).
- "description": A VERY DETAILED and SPECIFIC description based on the user's statements. Include ALL relevant details about what exactly {what}.
- "location": The location mentioned by the user.
- "contactInfo": The contact information provided by the user.
- "tags": An array of 1-5 relevant keyword tags based on the description (e.g., ["moving", "elderly", "transportation"]).
- "type": "{intent.post_type.value}"

VERY IMPORTANT: The post MUST be created in the EXACT SAME LANGUAGE used in the conversation ({language}).
If the conversation was in Arabic, the title and description must be in Arabic.
If it was in Spanish, use Spanish, etc. DO NOT translate to English.

VITAL FOR HELP REQUESTS: If the user's description was vague (like "I need guidance" or "I need help"),
but they provided more specific details later in the conversation, make sure to INCLUDE ALL THESE SPECIFIC DETAILS
in the description. The description should clearly explain EXACTLY what help is needed, leaving no room for confusion.

The post should use clear, simple language while maintaining the original language of the conversation.
Ensure the meaning is preserved accurately while making the content easy to understand.

If any of the required fields (description, location, contactInfo) cannot be determined from the conversation, set their value to an empty string (""). If no tags can be determined, use an empty array ([]).

Return ONLY the JSON object. Do not include any explanatory text before or after the JSON.
"""
