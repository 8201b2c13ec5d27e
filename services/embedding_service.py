"""
Statistical style embedding for a contact's message history.

The vector is a handful of aggregate statistics rather than a learned
embedding:

    [avg exclamations per message,
     avg question marks per message,
     uppercase character ratio,
     avg characters per message,
     avg words per message]
"""
import re
from typing import List, Sequence

from models.data_models import Message

EMBEDDING_DIMENSIONS = 5

_WORD_SEPARATORS = re.compile(r"[ \n\r]+")


def count_words(body: str) -> int:
    """Words are separated by spaces and newlines; empty pieces do not count."""
    return len([w for w in _WORD_SEPARATORS.split(body) if w])


def generate_embedding(messages: Sequence[Message]) -> List[float]:
    """Compute the 5-dimensional style vector; an empty history yields []."""
    if not messages:
        return []

    exclamations = 0
    questions = 0
    uppercase = 0
    total_chars = 0
    total_words = 0
    for message in messages:
        body = message.body
        exclamations += body.count("!")
        questions += body.count("?")
        uppercase += sum(1 for c in body if c.isupper())
        total_chars += len(body)
        total_words += count_words(body)

    count = float(len(messages))
    return [
        exclamations / count,
        questions / count,
        uppercase / float(max(total_chars, 1)),
        total_chars / count,
        total_words / count,
    ]
