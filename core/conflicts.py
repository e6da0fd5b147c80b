"""Detection of abbrlinks shared by more than one document."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from core.tasks import FileTask

logger = logging.getLogger(__name__)


@dataclass
class HashConflict:
    """Documents sharing one abbrlink."""

    abbrlink: str
    tasks: List[FileTask] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.tasks)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "abbrlink": self.abbrlink,
            "files": [str(t.document.file_path) for t in self.tasks],
        }


def find_hash_conflicts(tasks: Iterable[FileTask]) -> List[HashConflict]:
    """
    Group tasks by their current abbrlink and keep groups with duplicates.

    Tasks without an assigned or existing abbrlink are ignored.

    Args:
        tasks: Task records to examine

    Returns:
        Conflict groups of two or more tasks, in first-seen order
    """
    hash_groups: Dict[str, List[FileTask]] = {}

    for task in tasks:
        abbrlink = task.current_abbrlink
        if abbrlink is None:
            continue
        hash_groups.setdefault(abbrlink, []).append(task)

    conflicts = [
        HashConflict(abbrlink=abbrlink, tasks=members)
        for abbrlink, members in hash_groups.items()
        if len(members) > 1
    ]

    logger.debug(f"Found {len(conflicts)} abbrlink conflict groups")
    return conflicts
