"""Directory traversal and Markdown document inventory."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import DocumentIOError
from core.frontmatter import parse_front_matter, set_abbrlink

logger = logging.getLogger(__name__)

CREATED_KEYS = ("date", "created")


@dataclass
class MarkdownDocument:
    """Represents a Markdown document in the collection."""

    file_path: Path
    name: str
    created_at: float

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "file_path": str(self.file_path),
            "name": self.name,
            "created_at": self.created_at,
        }


class VaultInventory:
    """Enumerates, reads and writes the documents of a vault directory."""

    def __init__(
        self,
        root_dir: Path,
        extensions: Optional[List[str]] = None,
        ignore_patterns: Optional[List[str]] = None,
    ):
        """
        Initialize inventory.

        Args:
            root_dir: Root directory of the collection
            extensions: File suffixes to include (e.g., ['.md'])
            ignore_patterns: Patterns to ignore (e.g., ['.*', '_*'])
        """
        self.root_dir = root_dir
        self.extensions = [e.lower() for e in (extensions or [".md"])]
        self.ignore_patterns = ignore_patterns if ignore_patterns is not None else [".*"]
        self.documents: List[MarkdownDocument] = []

    def scan(self) -> List[MarkdownDocument]:
        """
        Scan root directory for documents.

        Returns:
            List of Markdown documents
        """
        logger.info(f"Scanning directory: {self.root_dir}")
        self.documents = []

        for path in sorted(self.root_dir.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in self.extensions:
                continue
            if self._should_ignore(path):
                continue

            self.documents.append(self.get_document(path))
            logger.debug(f"Found: {path.relative_to(self.root_dir)}")

        logger.info(f"Found {len(self.documents)} documents")
        return self.documents

    def get_document(self, path: Path) -> MarkdownDocument:
        """Build the document handle for a single path."""
        return MarkdownDocument(
            file_path=path,
            name=path.stem,
            created_at=self._file_created_at(path),
        )

    def read_text(self, doc: MarkdownDocument) -> str:
        """
        Read a document's raw text.

        Raises:
            DocumentIOError: If the file cannot be read or decoded
        """
        try:
            with open(doc.file_path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentIOError(doc.file_path, "read", e) from e

    def write_abbrlink(self, doc: MarkdownDocument, abbrlink: str):
        """
        Set the abbrlink field of a document, leaving other metadata untouched.

        Raises:
            DocumentIOError: If the file cannot be read back or written
        """
        text = self.read_text(doc)
        try:
            with open(doc.file_path, "w", encoding="utf-8", newline="") as f:
                f.write(set_abbrlink(text, abbrlink))
        except OSError as e:
            raise DocumentIOError(doc.file_path, "write", e) from e

        logger.debug(f"Wrote abbrlink {abbrlink} to {doc.file_path.name}")

    def refresh_created_at(self, doc: MarkdownDocument, text: str):
        """Prefer a creation date declared in the front matter over file times."""
        declared = _declared_timestamp(parse_front_matter(text))
        if declared is not None:
            doc.created_at = declared

    def _should_ignore(self, path: Path) -> bool:
        """Check if path should be ignored."""
        try:
            parts = path.relative_to(self.root_dir).parts
        except ValueError:
            parts = path.parts

        for pattern in self.ignore_patterns:
            for part in parts:
                if pattern.startswith("*") and part.endswith(pattern[1:]):
                    return True
                elif pattern.endswith("*") and part.startswith(pattern[:-1]):
                    return True
                elif pattern.strip("*") == part:
                    return True
        return False

    @staticmethod
    def _file_created_at(path: Path) -> float:
        stat = path.stat()
        return getattr(stat, "st_birthtime", stat.st_mtime)


def _declared_timestamp(front_matter: Dict[str, Any]) -> Optional[float]:
    for key in CREATED_KEYS:
        value = front_matter.get(key)
        if isinstance(value, datetime):
            return value.timestamp()
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day).timestamp()
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip()).timestamp()
            except ValueError:
                continue
    return None
