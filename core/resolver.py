"""Iterative abbrlink collision resolution."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set

from config import Config
from core.conflicts import HashConflict, find_hash_conflicts
from core.notices import LoggingNotifier, NoticeManager
from core.tasks import FileTask
from utils.hash import generate_abbrlink, random_hash

logger = logging.getLogger(__name__)

DEFAULT_MAX_REDRAWS = 32


class ResolutionState(str, Enum):
    """States of the resolution protocol."""

    ASSIGNING = "assigning"
    DETECTING = "detecting"
    REASSIGNING = "reassigning"
    COMMITTED = "committed"
    EXHAUSTED = "exhausted"


@dataclass
class ResolutionResult:
    """Outcome of one resolution run."""

    state: ResolutionState
    rounds: int
    conflicts: List[HashConflict] = field(default_factory=list)
    committable: List[FileTask] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.state is ResolutionState.COMMITTED

    @property
    def unresolved_tasks(self) -> List[FileTask]:
        return [task for conflict in self.conflicts for task in conflict.tasks]


class CollisionResolver:
    """
    Assigns abbrlinks and reassigns colliding ones until they are unique.

    Each round detects the groups of tasks sharing an abbrlink. Within a
    group the earliest-created task keeps its abbrlink and every other task
    gets a fresh random one, redrawn until it matches no abbrlink held by
    any task. The loop stops when no group is left or after
    ``config.max_rounds`` reassignment rounds.

    Pinned tasks hold abbrlinks that must not change in this run (documents
    skipped by policy). They take part in detection and always win the
    tie-break; groups made only of pinned tasks are left alone.
    """

    def __init__(
        self,
        config: Config,
        notices: Optional[NoticeManager] = None,
        max_redraws: int = DEFAULT_MAX_REDRAWS,
    ):
        """
        Initialize resolver.

        Args:
            config: Active configuration
            notices: Optional notice manager for per-round status
            max_redraws: Random draws allowed per task and round
        """
        self.config = config
        self.notices = notices or NoticeManager(LoggingNotifier())
        self.max_redraws = max_redraws
        self.state = ResolutionState.ASSIGNING

    def assign(self, tasks: Iterable[FileTask], random_mode: Optional[bool] = None):
        """Give every task lacking an assigned abbrlink a generated one."""
        for task in tasks:
            if task.assigned_abbrlink is None:
                task.assigned_abbrlink = generate_abbrlink(task.name, self.config, random_mode)

    def resolve(
        self,
        tasks: Sequence[FileTask],
        pinned: Sequence[FileTask] = (),
        random_mode: Optional[bool] = None,
    ) -> ResolutionResult:
        """
        Run the resolution protocol over the given tasks.

        Args:
            tasks: Tasks whose abbrlinks may be (re)assigned
            pinned: Tasks whose existing abbrlinks are kept
            random_mode: Overrides ``config.use_random_mode`` for the initial assignment

        Returns:
            Resolution result with the final state and the tasks safe to commit
        """
        self.state = ResolutionState.ASSIGNING
        self.assign(tasks, random_mode)

        pinned_ids = {id(task) for task in pinned}
        everything = list(tasks) + list(pinned)
        rounds = 0

        while True:
            self.state = ResolutionState.DETECTING
            check = rounds + 1
            self.notices.collision_check(check)
            conflicts = self._actionable(find_hash_conflicts(everything), pinned_ids)
            self.notices.collision_status(check, len(conflicts))
            logger.info(f"[COLLISION CHECK {check}] {len(conflicts)} conflict group(s)")

            if not conflicts:
                self.state = ResolutionState.COMMITTED
                break
            if rounds >= self.config.max_rounds:
                self.state = ResolutionState.EXHAUSTED
                break

            self.state = ResolutionState.REASSIGNING
            rounds += 1
            self.notices.resolving(rounds, self.config.max_rounds)
            self._reassign(conflicts, everything, pinned_ids)

        unresolved = {id(task) for conflict in conflicts for task in conflict.tasks}
        committable = [task for task in tasks if id(task) not in unresolved]

        if self.state is ResolutionState.EXHAUSTED:
            logger.warning(
                f"[EXHAUSTED] {len(conflicts)} conflict group(s) remain after {rounds} round(s)"
            )

        return ResolutionResult(
            state=self.state, rounds=rounds, conflicts=conflicts, committable=committable
        )

    @staticmethod
    def _actionable(conflicts: List[HashConflict], pinned_ids: Set[int]) -> List[HashConflict]:
        actionable = []
        for conflict in conflicts:
            if all(id(task) in pinned_ids for task in conflict.tasks):
                logger.debug(f"Ignoring pre-existing duplicate abbrlink {conflict.abbrlink}")
                continue
            actionable.append(conflict)
        return actionable

    def _reassign(
        self, conflicts: List[HashConflict], everything: List[FileTask], pinned_ids: Set[int]
    ):
        # Live count of every abbrlink currently held, updated as tasks move
        held = Counter(t.current_abbrlink for t in everything if t.current_abbrlink)

        for conflict in conflicts:
            members = sorted(conflict.tasks, key=lambda t: t.sort_key)
            keepers = [t for t in members if id(t) in pinned_ids] or members[:1]
            keeper_ids = {id(t) for t in keepers}

            for task in members:
                if id(task) in keeper_ids:
                    continue
                new_abbrlink = self._draw_unique(held)
                held[task.current_abbrlink] -= 1
                held[new_abbrlink] += 1
                logger.debug(
                    f"[REASSIGN] {task.document.file_path.name}: "
                    f"{task.current_abbrlink} -> {new_abbrlink}"
                )
                task.assigned_abbrlink = new_abbrlink

    def _draw_unique(self, held: Counter) -> str:
        candidate = ""
        for _ in range(self.max_redraws):
            candidate = random_hash(
                self.config.hash_length, self.config.encoding, self.config.decimal_reduction
            )
            if held[candidate] == 0:
                return candidate

        logger.warning(
            f"No free abbrlink found after {self.max_redraws} draws, keeping {candidate}"
        )
        return candidate
