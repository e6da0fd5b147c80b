"""Task list construction and processing filters."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Tuple

from tqdm import tqdm

from config import Config
from core.errors import DocumentIOError
from core.inventory import MarkdownDocument, VaultInventory
from utils.text import extract_abbrlink, extract_any_abbrlink

logger = logging.getLogger(__name__)


@dataclass
class FileTask:
    """One document's state for a single processing run."""

    document: MarkdownDocument
    existing_abbrlink: Optional[str] = None
    assigned_abbrlink: Optional[str] = None
    needs_length_update: bool = False
    created_at: float = 0.0

    @property
    def has_abbrlink(self) -> bool:
        return self.existing_abbrlink is not None

    @property
    def current_abbrlink(self) -> Optional[str]:
        """Identifier under consideration: assigned, falling back to existing."""
        return self.assigned_abbrlink or self.existing_abbrlink

    @property
    def name(self) -> str:
        return self.document.name

    @property
    def sort_key(self) -> Tuple[float, str]:
        """Tie-break key: creation time, then path for a stable order."""
        return self.created_at, str(self.document.file_path)


class TaskManager:
    """Build and filter the per-document task list."""

    def __init__(self, inventory: VaultInventory, config: Config):
        """
        Initialize task manager.

        Args:
            inventory: Collection collaborator used for reads
            config: Active configuration
        """
        self.inventory = inventory
        self.config = config
        self.failures: List[DocumentIOError] = []

    def build_task(self, doc: MarkdownDocument) -> FileTask:
        """Read one document and build its task record."""
        text = self.inventory.read_text(doc)
        self.inventory.refresh_created_at(doc, text)

        existing = extract_abbrlink(text, self.config.hash_length, self.config.encoding)
        if existing is None:
            # An identifier written under another hash_length still counts as existing
            existing = extract_any_abbrlink(text, self.config.encoding)

        return FileTask(
            document=doc,
            existing_abbrlink=existing,
            needs_length_update=bool(existing and len(existing) != self.config.hash_length),
            created_at=doc.created_at,
        )

    def build_task_list(self, documents: List[MarkdownDocument]) -> List[FileTask]:
        """
        Read all documents concurrently and build their task records.

        Unreadable documents are recorded in ``self.failures`` and left out,
        unless ``processing.fail_fast`` is set, in which case the first
        failure cancels the pending reads and propagates.

        Args:
            documents: Documents of the collection

        Returns:
            Task records, in completion order
        """
        self.failures = []
        tasks: List[FileTask] = []
        workers = self.config.processing.workers

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.build_task, doc): doc for doc in documents}
            with tqdm(
                as_completed(futures),
                total=len(futures),
                desc="Reading documents",
                unit="doc",
                ncols=80,
                disable=not self.config.notices.progress_bar,
            ) as progress:
                for future in progress:
                    try:
                        tasks.append(future.result())
                    except DocumentIOError as e:
                        if self.config.processing.fail_fast:
                            executor.shutdown(wait=False, cancel_futures=True)
                            raise
                        logger.error(f"[READ ERROR] {e}")
                        self.failures.append(e)

        logger.info(
            f"Built {len(tasks)} tasks "
            f"({sum(t.has_abbrlink for t in tasks)} with existing abbrlinks, "
            f"{sum(t.needs_length_update for t in tasks)} with a different length)"
        )
        return tasks

    def filter_tasks_to_process(self, tasks: List[FileTask]) -> List[FileTask]:
        """
        Select the tasks this run should (re)assign.

        Args:
            tasks: All task records

        Returns:
            Every task when skip_existing is off; otherwise tasks without an
            abbrlink plus, with override_on_length_mismatch, tasks whose
            abbrlink has a different length
        """
        if not self.config.skip_existing:
            return list(tasks)

        return [
            task
            for task in tasks
            if not task.has_abbrlink
            or (self.config.override_on_length_mismatch and task.needs_length_update)
        ]
