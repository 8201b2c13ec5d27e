"""
Configuration data models for the conversation reconstruction engine.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List


@dataclass
class ReconstructionConfig:
    """Heuristic thresholds used when rebuilding conversations from OCR lines.

    The values are empirically tuned against messaging-app screenshots; all
    horizontal positions are normalized to [0, 1].
    """
    # Contact name candidates must be roughly centered
    contact_min_mid_x: float = 0.2
    contact_max_mid_x: float = 0.8
    # Bubbles whose center lies right of this split belong to the user
    orientation_split_x: float = 0.6
    contact_max_words: int = 3
    contact_max_chars: int = 30
    # Minimum digits for a phone-number-shaped contact fallback
    phone_min_digits: int = 5
    # A line among the first N lines with more than M words is treated as cut off
    truncated_top_lines: int = 2
    truncated_min_words: int = 5
    # Letterless tokens up to this length are stray OCR noise
    short_token_max_chars: int = 3
    synthetic_step_seconds: float = 0.1
    self_label: str = "You"
    other_label: str = "Other"
    extra_noise_words: List[str] = field(default_factory=list)


@dataclass
class OCRConfig:
    """OCR engine configuration."""
    language: str = "en"
    confidence_threshold: float = 0.5
    use_angle_cls: bool = False


@dataclass
class StorageConfig:
    """Where contacts and pending imports are kept."""
    directory: str = "./data"
    contacts_file: str = "contacts.json"
    import_file: str = "import.txt"


@dataclass
class AssistantConfig:
    """Context-building settings for the reply assistant."""
    recent_message_count: int = 6
    fallback_suggestions: List[str] = field(default_factory=lambda: ["Friendly", "Decline", "Make a plan"])


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: str = "./logs/reconstruction.log"
    max_size: str = "10MB"


@dataclass
class AppConfig:
    """Main application configuration."""
    default_label: str = "Unknown"

    # Nested configurations
    reconstruction: ReconstructionConfig = field(default_factory=ReconstructionConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        errors = []
        rc = self.reconstruction

        for name in ("contact_min_mid_x", "contact_max_mid_x", "orientation_split_x"):
            value = getattr(rc, name)
            if value < 0.0 or value > 1.0:
                errors.append(f"reconstruction.{name} must be between 0.0 and 1.0")
        if rc.contact_min_mid_x >= rc.contact_max_mid_x:
            errors.append("reconstruction.contact_min_mid_x must be less than contact_max_mid_x")

        for name in ("contact_max_words", "contact_max_chars", "phone_min_digits"):
            if getattr(rc, name) < 1:
                errors.append(f"reconstruction.{name} must be at least 1")
        for name in ("truncated_top_lines", "truncated_min_words", "short_token_max_chars"):
            if getattr(rc, name) < 0:
                errors.append(f"reconstruction.{name} must not be negative")

        if rc.synthetic_step_seconds <= 0:
            errors.append("reconstruction.synthetic_step_seconds must be positive")
        if not rc.self_label.strip() or not rc.other_label.strip():
            errors.append("reconstruction.self_label and other_label must not be empty")

        if self.ocr.confidence_threshold < 0.0 or self.ocr.confidence_threshold > 1.0:
            errors.append("ocr.confidence_threshold must be between 0.0 and 1.0")

        if not self.default_label.strip():
            errors.append("default_label must not be empty")

        if self.assistant.recent_message_count < 1:
            errors.append("assistant.recent_message_count must be at least 1")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        rc = self.reconstruction
        return {
            "app": {
                "default_label": self.default_label,
            },
            "reconstruction": {
                "contact_min_mid_x": rc.contact_min_mid_x,
                "contact_max_mid_x": rc.contact_max_mid_x,
                "orientation_split_x": rc.orientation_split_x,
                "contact_max_words": rc.contact_max_words,
                "contact_max_chars": rc.contact_max_chars,
                "phone_min_digits": rc.phone_min_digits,
                "truncated_top_lines": rc.truncated_top_lines,
                "truncated_min_words": rc.truncated_min_words,
                "short_token_max_chars": rc.short_token_max_chars,
                "synthetic_step_seconds": rc.synthetic_step_seconds,
                "self_label": rc.self_label,
                "other_label": rc.other_label,
                "extra_noise_words": list(rc.extra_noise_words),
            },
            "ocr": {
                "language": self.ocr.language,
                "confidence_threshold": self.ocr.confidence_threshold,
                "use_angle_cls": self.ocr.use_angle_cls,
            },
            "storage": {
                "directory": self.storage.directory,
                "contacts_file": self.storage.contacts_file,
                "import_file": self.storage.import_file,
            },
            "assistant": {
                "recent_message_count": self.assistant.recent_message_count,
                "fallback_suggestions": list(self.assistant.fallback_suggestions),
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "max_size": self.logging.max_size,
            }
        }
