"""
Import controller orchestrating parsing, reconstruction, merging and storage.
"""
from datetime import datetime
import logging
import threading
from typing import Callable, List, Optional, Sequence

from models.config import AppConfig
from models.data_models import Contact, RecognizedLine, ReconstructionResult
from services.contact_merge import find_contact, merge_messages, resolve_label
from services.contact_store import ContactStore
from services.ocr_adapter import ImageSource, ScreenshotOCR
from services.screenshot_parser import ScreenshotReconstructor
from services.transcript_parser import TranscriptParser


class ImportController:
    """Coordinates the import workflow for one contact list.

    The controller owns the in-memory contact list. Merges run under a lock so
    concurrent imports cannot lose each other's updates; parsing and OCR run
    outside of it.
    """

    def __init__(self, config: Optional[AppConfig] = None, store: Optional[ContactStore] = None,
                 ocr: Optional[ScreenshotOCR] = None, clock: Callable[[], datetime] = datetime.now):
        self.logger = logging.getLogger(__name__)
        self.config = config or AppConfig()
        self.store = store or ContactStore(self.config.storage)
        self.ocr = ocr
        self.transcripts = TranscriptParser()
        self.screenshots = ScreenshotReconstructor(self.config.reconstruction, clock=clock)
        self._lock = threading.Lock()
        self.contacts: List[Contact] = self.store.load()

    def get_contact(self, label: str) -> Optional[Contact]:
        return find_contact(self.contacts, label)

    def _merge_and_persist(self, messages, label: str, handle: Optional[str] = None) -> Contact:
        with self._lock:
            contact = merge_messages(self.contacts, messages, label, handle)
            self.store.save(self.contacts)
        return contact

    def import_transcript(self, text: str, label: str, handle: Optional[str] = None,
                          start: Optional[datetime] = None, end: Optional[datetime] = None) -> Contact:
        """Parse an exported transcript and merge it into the labelled contact."""
        messages = self.transcripts.parse(text, start=start, end=end)
        final_label = resolve_label(label, default=self.config.default_label)
        self.logger.info(f"Transcript import: {len(messages)} messages for '{final_label}'")
        return self._merge_and_persist(messages, final_label, handle)

    def reconstruct(self, batches: Sequence[Sequence[RecognizedLine]]) -> ReconstructionResult:
        return self.screenshots.reconstruct(batches)

    def import_screenshot_batches(self, batches: Sequence[Sequence[RecognizedLine]],
                                  label: Optional[str] = None) -> Contact:
        """Reconstruct OCR batches (newest first) and merge the result.

        The contact label is the caller's label, else the detected contact
        name, else the configured default.
        """
        result = self.reconstruct(batches)
        final_label = resolve_label(label, result.contact_name, self.config.default_label)
        if not result.messages:
            self.logger.info(f"No messages recovered from {len(batches)} screenshots")
        return self._merge_and_persist(result.messages, final_label)

    def import_screenshot_files(self, sources: Sequence[ImageSource], label: Optional[str] = None) -> Contact:
        """Run OCR over screenshot files (newest first) and import them."""
        if self.ocr is None:
            self.ocr = ScreenshotOCR(self.config.ocr)
        batches = self.ocr.recognize_batches(sources)
        return self.import_screenshot_batches(batches, label)

    def process_pending_import(self, label: str, handle: Optional[str] = None) -> Optional[Contact]:
        """Import a transcript left behind by the share hand-off, if one exists."""
        text = self.store.load_pending_import()
        if text is None:
            return None
        return self.import_transcript(text, label, handle)
