"""
JSON document persistence.

The whole data set lives in one file. Reads parse it wholesale, writes go to
a temporary file that is then renamed over the original. ``transaction``
serialises read-modify-write cycles within the process.
"""
import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from pybreaker import CircuitBreaker

from .circuit_breaker import store_circuit_breaker
from .errors import InvalidDocumentError, StoreError
from .models import Document

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("users", "groups", "apartments")
OPTIONAL_TABLES = ("logs", "user_groups")


def empty_document() -> Dict[str, Any]:
    return {"users": [], "groups": [], "apartments": [], "logs": [], "user_groups": []}


def validate_raw_document(raw: Any) -> Dict[str, Any]:
    """
    Check the top-level shape of a document and fill in optional tables.

    Raises ``InvalidDocumentError`` when a required table is missing or is
    not a list.
    """
    if not isinstance(raw, dict):
        raise InvalidDocumentError("Invalid data structure: document must be an object")
    for table in REQUIRED_TABLES:
        if not isinstance(raw.get(table), list):
            raise InvalidDocumentError(f"Invalid data structure: {table} must be an array")
    for table in OPTIONAL_TABLES:
        if not isinstance(raw.get(table), list):
            raw[table] = []
    return raw


def parse_document(raw: Any) -> Document:
    raw = validate_raw_document(raw)
    try:
        return Document.from_dict(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidDocumentError(f"Invalid data structure: {e}") from e


class DocumentStore:
    def __init__(self, path: str, breaker: Optional[CircuitBreaker] = None):
        self.path = Path(path)
        self.breaker = breaker or store_circuit_breaker
        self._lock = threading.RLock()

    # ----- Raw access -----
    def read_raw(self) -> Dict[str, Any]:
        with self._lock:
            if not self.path.exists():
                logger.info("Data file %s missing, creating an empty document", self.path)
                raw = empty_document()
                self._write(raw)
                return raw
            try:
                with self.path.open("r", encoding="utf-8") as fh:
                    raw = json.load(fh)
            except (OSError, json.JSONDecodeError) as e:
                logger.error("Failed to read %s: %s", self.path, e)
                raise StoreError("Failed to read data file") from e
            return validate_raw_document(raw)

    def _write(self, raw: Dict[str, Any]) -> None:
        @self.breaker
        def _write_file():
            tmp = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with tmp.open("w", encoding="utf-8") as fh:
                    json.dump(raw, fh, indent=2)
                os.replace(tmp, self.path)
            except OSError as e:
                logger.error("Failed to write %s: %s", self.path, e)
                raise StoreError("Failed to write data file") from e

        _write_file()

    # ----- Document access -----
    def load(self) -> Document:
        return parse_document(self.read_raw())

    def save(self, document: Document) -> None:
        with self._lock:
            self._write(document.to_dict())
        logger.debug("Saved document to %s", self.path)

    def replace(self, raw: Any) -> Document:
        """Replace the whole document after validating it."""
        document = parse_document(raw)
        self.save(document)
        logger.info("Document replaced (%s)", document.table_counts())
        return document

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """
        Load the document, hand it to the caller and save it back.

        Nothing is written if the block raises.
        """
        with self._lock:
            document = self.load()
            yield document
            self.save(document)
