"""
Prompt context for the reply assistant.

The language model itself is an external capability: anything with a
``generate(context) -> str`` method. This module only decides what the
model gets to see (contact label, style embedding, the last few messages)
and how its answers are interpreted.
"""
import logging
import re
from typing import List, Optional, Protocol, Sequence

from models.config import AssistantConfig
from models.data_models import Contact, Message

SYSTEM_PROMPT = (
    "You are an expert text-conversation assistant. You know how to mimic "
    "different people's tones and help the user craft replies."
)

SUGGESTION_PROMPT = (
    "Based on this conversation, suggest three different general goals the user might have "
    "for their reply. Each suggestion should be one to three words. Separate the suggestions "
    "with commas or new lines. Return only the suggestions, nothing else."
)

_SUGGESTION_SPLIT = re.compile(r"[,\n]")


class TextGenerator(Protocol):
    def generate(self, context: str) -> str:
        ...


def format_style_embedding(embedding: Optional[Sequence[float]]) -> Optional[str]:
    if not embedding:
        return None
    return "StyleEmbedding: [" + ", ".join(f"{v:.3f}" for v in embedding) + "]"


def format_history(contact: Contact, messages: Sequence[Message], self_label: str = "You") -> List[str]:
    """One line per message; anything not from the user is attributed to the contact."""
    lines = []
    for msg in messages:
        who = self_label if msg.sender == self_label else contact.label
        lines.append(f"- {who} [{msg.timestamp.isoformat(timespec='seconds')}]: {msg.body}")
    return lines


def _header(contact: Contact) -> List[str]:
    parts = [f"Contact: {contact.label}"]
    style = format_style_embedding(contact.style_embedding)
    if style:
        parts.append(style)
    return parts


def build_reply_context(contact: Contact, recent: Sequence[Message], goal: str, multi_step: bool = False) -> str:
    parts = [SYSTEM_PROMPT, ""] + _header(contact) + [f"Goal: {goal}", "History:"]
    parts += format_history(contact, recent)
    if multi_step:
        parts.append(
            f"Please write a sequence of 2-3 messages that achieves the user's goal. "
            f"Keep the tone true to how {contact.label} and the user usually talk."
        )
    else:
        parts.append(
            f"Please write 1 reply that achieves the user's goal. "
            f"Keep the tone true to how {contact.label} and the user usually talk."
        )
    return "\n".join(parts)


def build_adjust_context(contact: Contact, message: str, instructions: str) -> str:
    parts = [SYSTEM_PROMPT, ""] + _header(contact)
    parts += [
        f"OriginalMessage: {message}",
        f"Instructions: {instructions}",
        "Please rewrite the original message according to the instructions while maintaining "
        "the user's tone and style. Return only the modified message.",
    ]
    return "\n".join(parts)


def build_help_context(contact: Contact, recent: Sequence[Message], prompt: str) -> str:
    parts = [SYSTEM_PROMPT, ""] + _header(contact) + ["RecentMessages:"]
    parts += format_history(contact, recent)
    parts += [
        f"UserPrompt: {prompt}",
        "Based on the context above, please provide the best possible advice or suggested "
        "message to help the user. Return just the advice/message.",
    ]
    return "\n".join(parts)


def parse_suggestions(response: str, fallback: Sequence[str], limit: int = 3) -> List[str]:
    """Split a comma/newline separated answer, padding with fallback entries."""
    parts = [p.strip() for p in _SUGGESTION_SPLIT.split(response or "") if p.strip()]
    return (parts + list(fallback))[:limit]


class ReplyAssistant:
    """Grounds language-model calls in a contact's recent history."""

    def __init__(self, generator: TextGenerator, config: Optional[AssistantConfig] = None):
        self.generator = generator
        self.config = config or AssistantConfig()
        self.logger = logging.getLogger(__name__)

    def recent_messages(self, contact: Contact) -> List[Message]:
        return list(contact.messages[-self.config.recent_message_count:])

    def generate_reply(self, contact: Contact, goal: str, multi_step: bool = False) -> List[str]:
        """Draft one reply (or a 2-3 message sequence); one draft per non-empty line.

        A blank model response yields no drafts.
        """
        context = build_reply_context(contact, self.recent_messages(contact), goal, multi_step)
        response = self.generator.generate(context) or ""
        drafts = [line.strip() for line in response.splitlines() if line.strip()]
        if not drafts:
            self.logger.warning("Reply generation returned no text")
        if multi_step:
            return drafts
        return drafts[:1]

    def adjust_message(self, contact: Contact, message: str, instructions: str) -> str:
        return self.generator.generate(build_adjust_context(contact, message, instructions)).strip()

    def text_help(self, contact: Contact, prompt: str) -> str:
        context = build_help_context(contact, self.recent_messages(contact), prompt)
        return self.generator.generate(context).strip()

    def suggest_replies(self, contact: Contact) -> List[str]:
        """Three short reply goals; falls back to canned goals on any failure."""
        fallback = list(self.config.fallback_suggestions)
        recent = self.recent_messages(contact)
        if not recent:
            return fallback[:3]
        try:
            response = self.generator.generate(build_help_context(contact, recent, SUGGESTION_PROMPT))
        except Exception as e:
            self.logger.warning(f"Reply suggestions unavailable, using fallback: {e}")
            return fallback[:3]
        return parse_suggestions(response, fallback)
