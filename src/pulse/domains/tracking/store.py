# src/pulse/domains/tracking/store.py
"""
Milestone Tracking Store

Sole owner of TrackingRecords. For each project it remembers the milestone
dates seen at baseline time and decides, on every evaluation pass, whether
the project deserves a drift notification or a "dates not yet confirmed"
reminder.

Per project the record moves through three states:

    FRESH --(a date changed)---------------> CHANGE_NOTIFIED
    FRESH --(dwell elapsed, nothing changed)-> REMINDED

``date_change_notified`` is never reset, so a project gets at most one
drift notification in its lifetime, and a project that has had one is
never reminded. A record change only takes effect once the JSON mirror (when
there is one) has been written.

Usage:
    store = TrackingStore(path="tracking.json", dwell=timedelta(hours=48))
    action = store.evaluate(project)
    if not action.is_noop:
        dispatcher.dispatch_tracking_action(action)
"""

import json
import logging
import os
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from ...dates import DateOrder, as_utc, normalize_date, utcnow
from ...models import Milestone, Project
from .models import (
    ActionKind,
    DateChange,
    MilestoneBaseline,
    TrackingAction,
    TrackingRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_DWELL = timedelta(hours=48)


class TrackingStore:
    """
    Process-scoped map of project id to TrackingRecord.

    Each record is read, modified and written under its project's lock, so
    two evaluations of the same project never interleave. When ``path`` is
    given, the whole mapping is mirrored to that JSON file after each change.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        dwell: timedelta = DEFAULT_REMINDER_DWELL,
        clock: Callable[[], datetime] = utcnow,
        date_order: DateOrder = DateOrder.MDY,
    ):
        self._path = Path(path) if path else None
        self._dwell = dwell
        self._clock = clock
        self._date_order = date_order

        self._records: Dict[str, TrackingRecord] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._write_lock = threading.Lock()

        self._load()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get(self, project_id: str) -> Optional[TrackingRecord]:
        record = self._records.get(project_id)
        return record.model_copy(deep=True) if record else None

    def all(self) -> List[TrackingRecord]:
        return [r.model_copy(deep=True) for r in list(self._records.values())]

    def get_or_init(self, project: Project) -> TrackingRecord:
        """Existing record for the project, or a new one baselined on its current dates."""
        with self._lock_for(project.id):
            return self._get_or_init_locked(project).model_copy(deep=True)

    def record_baseline(
        self,
        project_id: str,
        project_name: str,
        milestones: Iterable[Milestone],
    ) -> TrackingRecord:
        """
        (Re)write the baseline for a project.

        Used right after a project is created through the form, so the
        baseline holds the dates the user typed rather than whatever the
        next fetch returns. Flags are cleared and the dwell timer restarts.
        """
        with self._lock_for(project_id):
            record = TrackingRecord(
                project_id=project_id,
                project_name=project_name,
                milestones=self._baselines(milestones),
                date_set_at=as_utc(self._clock()),
            )
            self._commit(record)
            logger.info(f"Recorded tracking baseline for {project_name} ({len(record.milestones)} milestones)")
            return record.model_copy(deep=True)

    def evaluate(self, project: Project) -> TrackingAction:
        """
        Compare current milestone dates with the baseline and decide.

        Date drift wins over the dwell reminder when both would apply.
        Milestones absent from the baseline are not tracked.
        """
        with self._lock_for(project.id):
            record = self._get_or_init_locked(project)
            now = as_utc(self._clock())
            changes = self._detect_changes(record, project.milestones)

            if changes and not record.date_change_notified:
                record = record.model_copy(deep=True)
                for change in changes:
                    record.baseline_for(change.milestone_id).initial_date = change.new_date
                record.date_change_notified = True
                self._commit(record)
                logger.info(f"Milestone dates changed for {project.name}: {len(changes)} change(s)")
                return TrackingAction(
                    kind=ActionKind.DATE_CHANGED,
                    project_id=project.id,
                    project_name=project.name,
                    changes=changes,
                    milestones=[m.model_copy() for m in record.milestones],
                )

            if (
                not changes
                and not record.reminder_sent
                and not record.date_change_notified
                and now - as_utc(record.date_set_at) >= self._dwell
            ):
                record = record.model_copy(update={"reminder_sent": True}, deep=True)
                self._commit(record)
                logger.info(f"Milestone dates unconfirmed for {project.name}; reminder due")
                return TrackingAction(
                    kind=ActionKind.REMINDER,
                    project_id=project.id,
                    project_name=project.name,
                    milestones=[m.model_copy() for m in record.milestones],
                )

            return TrackingAction(project_id=project.id, project_name=project.name)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = self._locks[project_id] = threading.Lock()
            return lock

    def _get_or_init_locked(self, project: Project) -> TrackingRecord:
        record = self._records.get(project.id)
        if record is None:
            record = TrackingRecord(
                project_id=project.id,
                project_name=project.name,
                milestones=self._baselines(project.milestones),
                date_set_at=as_utc(self._clock()),
            )
            self._commit(record)
            logger.info(f"Started tracking {project.name} ({project.id})")
        return record

    def _baselines(self, milestones: Iterable[Milestone]) -> List[MilestoneBaseline]:
        return [
            MilestoneBaseline(
                id=m.id,
                name=m.name,
                initial_date=normalize_date(m.target_date, self._date_order),
            )
            for m in milestones
        ]

    def _detect_changes(self, record: TrackingRecord, milestones: Iterable[Milestone]) -> List[DateChange]:
        changes = []
        for milestone in milestones:
            baseline = record.baseline_for(milestone.id)
            if baseline is None:
                continue
            current = normalize_date(milestone.target_date, self._date_order)
            if current != baseline.initial_date:
                changes.append(DateChange(
                    milestone_id=milestone.id,
                    name=milestone.name,
                    old_date=baseline.initial_date,
                    new_date=current,
                ))
        return changes

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def to_json(self) -> str:
        """Serialize the whole mapping, camelCase fields, as the file holds it."""
        data = {pid: record.to_api() for pid, record in list(self._records.items())}
        return json.dumps(data, indent=2, sort_keys=True)

    @staticmethod
    def records_from_json(raw: str) -> Dict[str, TrackingRecord]:
        data = json.loads(raw) or {}
        return {pid: TrackingRecord.model_validate(record) for pid, record in data.items()}

    def _commit(self, record: TrackingRecord) -> None:
        """Swap in ``record`` and mirror it; the previous record stays if the write fails."""
        previous = self._records.get(record.project_id)
        self._records[record.project_id] = record
        try:
            self._persist()
        except OSError:
            if previous is None:
                self._records.pop(record.project_id, None)
            else:
                self._records[record.project_id] = previous
            raise

    def _persist(self) -> None:
        if not self._path:
            return
        with self._write_lock:
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(self.to_json(), encoding="utf-8")
            os.replace(tmp_path, self._path)

    def _load(self) -> None:
        if not self._path or not self._path.exists():
            return
        try:
            self._records = self.records_from_json(self._path.read_text(encoding="utf-8"))
            logger.info(f"Loaded {len(self._records)} tracking record(s) from {self._path}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load tracking records from {self._path}: {e}")
            self._records = {}
