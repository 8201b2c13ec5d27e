"""
File-backed persistence for contacts and pending transcript imports.

Contacts are kept as a single JSON document; a share hand-off drops raw
transcript text into ``import.txt`` which is consumed exactly once.
"""
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import List, Optional

from models.config import StorageConfig
from models.data_models import Contact


class ContactStore:
    """
    Handles persistence of Contact objects to disk.
    """

    def __init__(self, storage_config: Optional[StorageConfig] = None):
        self.logger = logging.getLogger(__name__)
        self.config = storage_config or StorageConfig()
        self._ensure_storage_dir()
        self.contacts_path = Path(self.config.directory) / self.config.contacts_file
        self.import_path = Path(self.config.directory) / self.config.import_file

    def _ensure_storage_dir(self) -> None:
        """Create storage directory if it does not exist."""
        try:
            storage_dir = Path(self.config.directory)
            storage_dir.mkdir(parents=True, exist_ok=True)
            self.logger.debug(f"Storage directory ready: {storage_dir}")
        except OSError as e:
            self.logger.error(f"Failed to create storage directory: {e}")
            raise

    def load(self) -> List[Contact]:
        """Load all contacts; a missing or unreadable file yields an empty list."""
        if not self.contacts_path.exists():
            return []
        try:
            with self.contacts_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                self.logger.warning(f"Contacts file malformed, ignoring: {self.contacts_path}")
                return []
            contacts = [Contact.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Failed to load contacts: {e}")
            return []
        self.logger.debug(f"Loaded {len(contacts)} contacts from {self.contacts_path}")
        return contacts

    def save(self, contacts: List[Contact]) -> Path:
        """Overwrite the contacts file atomically.

        The document is written to a temporary file in the same directory and
        moved into place, so a crash never leaves a half-written file.
        """
        data = [c.to_dict() for c in contacts]
        fd, tmp_name = tempfile.mkstemp(dir=str(self.contacts_path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.contacts_path)
        except OSError as e:
            self.logger.error(f"Failed to save contacts: {e}")
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self.logger.info(f"Saved {len(contacts)} contacts to {self.contacts_path}")
        return self.contacts_path

    def save_import(self, text: str) -> bool:
        """Stash raw transcript text for the next ``--pending`` run (``import_transcript --stash``)."""
        try:
            self.import_path.write_text(text, encoding="utf-8")
            return True
        except OSError as e:
            self.logger.warning(f"Failed to save import text: {e}")
            return False

    def load_pending_import(self) -> Optional[str]:
        """Return the stashed transcript and delete it, or None if there is none."""
        if not self.import_path.exists():
            return None
        try:
            text = self.import_path.read_text(encoding="utf-8")
            self.import_path.unlink()
        except OSError as e:
            self.logger.warning(f"Failed to load or remove import file: {e}")
            return None
        self.logger.info(f"Consumed pending import: {self.import_path}")
        return text
