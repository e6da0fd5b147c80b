"""Run orchestration: task selection, assignment policy and commit."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from config import Config
from core.conflicts import HashConflict, find_hash_conflicts
from core.errors import AbbrlinkError, DocumentIOError
from core.inventory import VaultInventory
from core.notices import LoggingNotifier, NoticeManager, Notifier, ProcessStep
from core.resolver import CollisionResolver, ResolutionState
from core.tasks import FileTask, TaskManager

logger = logging.getLogger(__name__)

STATUS_WRITTEN = "written"
STATUS_UNCHANGED = "unchanged"
STATUS_UNRESOLVED = "unresolved"
STATUS_FAILED = "failed"
STATUS_DRY_RUN = "dry_run"


@dataclass
class RunReport:
    """Summary of one processing run."""

    total: int = 0
    processed: int = 0
    written: int = 0
    unchanged: int = 0
    planned: int = 0
    rounds: int = 0
    state: Optional[ResolutionState] = None
    conflicts: List[HashConflict] = field(default_factory=list)
    failures: List[DocumentIOError] = field(default_factory=list)
    tasks: List[FileTask] = field(default_factory=list)
    records: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def unresolved(self) -> int:
        return sum(1 for r in self.records if r["status"] == STATUS_UNRESOLVED)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def add_record(self, task: FileTask, status: str):
        self.records.append(
            {
                "path": str(task.document.file_path),
                "name": task.name,
                "previous_abbrlink": task.existing_abbrlink,
                "abbrlink": task.assigned_abbrlink,
                "status": status,
                "needs_length_update": task.needs_length_update,
                "created_at": task.created_at,
            }
        )


class AbbrlinkProcessor:
    """Applies the configured policy to a collection and commits abbrlinks."""

    def __init__(
        self,
        inventory: VaultInventory,
        config: Config,
        notifier: Optional[Notifier] = None,
    ):
        """
        Initialize processor.

        Args:
            inventory: Collection collaborator
            config: Active configuration, not modified during a run
            notifier: Sink for user notices (defaults to the log)
        """
        self.inventory = inventory
        self.config = config
        self.notices = NoticeManager(
            notifier or LoggingNotifier(), config.notices.warning_duration_ms
        )
        self.task_manager = TaskManager(inventory, config)
        self.resolver = CollisionResolver(config, self.notices)

    def process_files(self) -> RunReport:
        """
        Generate abbrlinks for the whole collection.

        Returns:
            Run report

        Raises:
            DocumentIOError: On the first I/O failure when processing.fail_fast is set
        """
        try:
            return self._process_files()
        except AbbrlinkError as e:
            logger.error(f"[FAILED] {e}")
            self.notices.failed()
            raise

    def _process_files(self) -> RunReport:
        logger.info(
            f"Processing {self.inventory.root_dir} "
            f"(length={self.config.hash_length}, encoding={self.config.encoding.value}, "
            f"random={self.config.use_random_mode}, check_collisions={self.config.check_collisions})"
        )

        self.notices.step(ProcessStep.BUILD_TASK_LIST, "building task list...")
        documents = self.inventory.scan()
        all_tasks = self.task_manager.build_task_list(documents)

        report = RunReport(total=len(documents), failures=list(self.task_manager.failures))
        for failure in report.failures:
            report.records.append(
                {"path": str(failure.path), "status": STATUS_FAILED, "error": str(failure.cause)}
            )

        tasks = self.task_manager.filter_tasks_to_process(all_tasks)
        report.processed = len(tasks)
        report.tasks = tasks

        new_count = sum(1 for t in tasks if not t.has_abbrlink)
        self.notices.processing_status(new_count, len(tasks) - new_count)
        logger.info(f"[FILTER] {len(tasks)} of {len(all_tasks)} documents selected")

        committable = tasks
        if tasks and self.config.check_collisions:
            selected = {id(t) for t in tasks}
            pinned = [t for t in all_tasks if id(t) not in selected]
            result = self.resolver.resolve(tasks, pinned)

            report.state = result.state
            report.rounds = result.rounds
            report.conflicts = result.conflicts
            committable = result.committable

            for task in result.unresolved_tasks:
                if id(task) in selected:
                    report.add_record(task, STATUS_UNRESOLVED)
        else:
            # Independent assignment, uniqueness is not checked
            self.resolver.assign(tasks)

        self._commit(committable, report)

        if report.state is ResolutionState.EXHAUSTED:
            self.notices.collision_warning(
                report.rounds,
                len(report.conflicts),
                self.config.hash_length,
                self.config.suggested_hash_length,
            )
        if report.failures:
            self.notices.failure_warning(len(report.failures))

        self.notices.completed(report.written, report.unchanged)
        logger.info(
            f"[DONE] {report.written} written, {report.unchanged} unchanged, "
            f"{report.unresolved} unresolved, {len(report.failures)} failed"
        )
        return report

    def process_file(self, path: Path, random_mode: Optional[bool] = True) -> Optional[str]:
        """
        Generate an abbrlink for a single (typically newly created) document.

        Args:
            path: Document path
            random_mode: Random mode for this call only; None uses the configuration

        Returns:
            The abbrlink in place after the call, or None when the collision
            could not be resolved
        """
        doc = self.inventory.get_document(path)
        task = self.task_manager.build_task(doc)

        if not self.task_manager.filter_tasks_to_process([task]):
            logger.info(f"[SKIP] {path.name} already has abbrlink {task.existing_abbrlink}")
            return task.existing_abbrlink

        if self.config.check_collisions:
            target = path.resolve()
            others = [
                t
                for t in self.task_manager.build_task_list(self.inventory.scan())
                if t.document.file_path.resolve() != target
            ]
            result = self.resolver.resolve([task], pinned=others, random_mode=random_mode)
            if not result.resolved:
                self.notices.collision_warning(
                    result.rounds,
                    len(result.conflicts),
                    self.config.hash_length,
                    self.config.suggested_hash_length,
                )
                return None
        else:
            self.resolver.assign([task], random_mode)

        report = RunReport(total=1, processed=1, tasks=[task])
        self._commit([task], report)
        if report.failures:
            raise report.failures[0]
        return task.assigned_abbrlink

    def find_existing_conflicts(self) -> List[HashConflict]:
        """Report abbrlinks already shared by several documents, without changing anything."""
        tasks = self.task_manager.build_task_list(self.inventory.scan())
        conflicts = find_hash_conflicts(tasks)
        for conflict in conflicts:
            logger.warning(
                f"[DUPLICATE] {conflict.abbrlink} used by "
                + ", ".join(t.document.file_path.name for t in conflict.tasks)
            )
        return conflicts

    def _commit(self, tasks: List[FileTask], report: RunReport):
        pending: List[FileTask] = []
        for task in tasks:
            if task.assigned_abbrlink == task.existing_abbrlink:
                report.unchanged += 1
                report.add_record(task, STATUS_UNCHANGED)
            else:
                pending.append(task)

        report.planned = len(pending)
        if self.config.dry_run:
            for task in pending:
                logger.info(
                    f"[DRY RUN] Would write {task.assigned_abbrlink} to {task.document.file_path}"
                )
                report.add_record(task, STATUS_DRY_RUN)
            return

        if not pending:
            return

        with ThreadPoolExecutor(max_workers=self.config.processing.workers) as executor:
            futures = {
                executor.submit(self.inventory.write_abbrlink, t.document, t.assigned_abbrlink): t
                for t in pending
            }
            with tqdm(
                as_completed(futures),
                total=len(futures),
                desc="Writing abbrlinks",
                unit="doc",
                ncols=80,
                disable=not self.config.notices.progress_bar,
            ) as progress:
                for future in progress:
                    task = futures[future]
                    try:
                        future.result()
                    except DocumentIOError as e:
                        if self.config.processing.fail_fast:
                            executor.shutdown(wait=False, cancel_futures=True)
                            raise
                        logger.error(f"[WRITE ERROR] {e}")
                        report.failures.append(e)
                        report.add_record(task, STATUS_FAILED)
                        continue

                    report.written += 1
                    report.add_record(task, STATUS_WRITTEN)
