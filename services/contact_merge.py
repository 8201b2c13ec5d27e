"""
Merge policy integrating freshly parsed messages into a contact list.

Messages are appended and the history re-sorted; nothing is deduplicated,
so importing the same source twice yields duplicate entries.
"""
import logging
from typing import List, Optional, Sequence

from models.data_models import Contact, Message
from services.embedding_service import generate_embedding
from services.message_filters import sort_chronologically

logger = logging.getLogger(__name__)


def resolve_label(explicit: Optional[str], detected: Optional[str] = None,
                  default: str = "Unknown") -> str:
    """Pick the first non-blank of the caller label, the detected name, the default."""
    for candidate in (explicit, detected):
        if candidate is not None and candidate.strip():
            return candidate.strip()
    return default


def find_contact(contacts: Sequence[Contact], label: str) -> Optional[Contact]:
    for contact in contacts:
        if contact.label == label:
            return contact
    return None


def refresh_embedding(contact: Contact) -> None:
    """Recompute the style embedding from the full history."""
    contact.style_embedding = generate_embedding(contact.messages) or None


def merge_messages(contacts: List[Contact], messages: Sequence[Message], label: str,
                   handle: Optional[str] = None) -> Contact:
    """Append ``messages`` to the contact labelled ``label``, creating it if needed.

    Args:
        contacts: the contact list owned by the caller; mutated in place.
        messages: newly parsed or reconstructed messages.
        label: exact label to match against existing contacts.
        handle: stored on newly created contacts, or on an existing contact
            that has none yet.

    Returns:
        Contact: the created or updated contact.
    """
    contact = find_contact(contacts, label)
    if contact is None:
        contact = Contact(label=label, handle=handle, messages=sort_chronologically(messages))
        contacts.append(contact)
        logger.info(f"Created contact '{label}' with {len(messages)} messages")
    else:
        contact.messages = sort_chronologically(list(contact.messages) + list(messages))
        if handle and not contact.handle:
            contact.handle = handle
        logger.info(f"Appended {len(messages)} messages to '{label}' ({len(contact.messages)} total)")

    refresh_embedding(contact)
    return contact
