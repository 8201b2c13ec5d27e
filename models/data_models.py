"""
Core data models for the conversation reconstruction engine.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Message:
    """A single chat message recovered from a transcript or a screenshot."""
    timestamp: datetime
    sender: str
    body: str
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "sender": self.sender,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sender=str(data.get("sender", "")),
            body=str(data.get("body", "")),
            id=str(data.get("id") or _new_id()),
        )


@dataclass
class Contact:
    """A conversation partner and the accumulated message history.

    ``messages`` is kept sorted ascending by timestamp after every merge;
    ``style_embedding`` is recomputed from the whole history whenever it
    changes and is ``None`` when absent.
    """
    label: str
    messages: List[Message] = field(default_factory=list)
    handle: Optional[str] = None
    style_embedding: Optional[List[float]] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "handle": self.handle,
            "messages": [m.to_dict() for m in self.messages],
            "style_embedding": list(self.style_embedding) if self.style_embedding is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        embedding = data.get("style_embedding")
        return cls(
            id=str(data.get("id") or _new_id()),
            label=str(data.get("label", "")),
            handle=data.get("handle"),
            messages=[Message.from_dict(m) for m in data.get("messages") or []],
            style_embedding=[float(v) for v in embedding] if embedding is not None else None,
        )


@dataclass(frozen=True)
class BoundingBox:
    """Normalized rectangle in [0, 1] x [0, 1] with the origin at bottom-left."""
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @classmethod
    def centered_at(cls, mid_x: float, mid_y: float, width: float = 0.0, height: float = 0.0) -> "BoundingBox":
        return cls(x=mid_x - width / 2.0, y=mid_y - height / 2.0, width=width, height=height)


@dataclass(frozen=True)
class RecognizedLine:
    """One unit of OCR output: text plus its normalized position."""
    text: str
    bounding_box: BoundingBox
    confidence: float = 1.0


@dataclass
class ReconstructionResult:
    """Messages recovered from a set of screenshots, oldest first."""
    messages: List[Message] = field(default_factory=list)
    contact_name: Optional[str] = None
