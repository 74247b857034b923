"""
Client-side view of the user's board.

Tasks are held in three ordered lists, one per status. Every mutation is sent
to the server first; the lists are patched only after the server confirms,
so a failed call never needs a rollback. The one exception is load(), which
empties the board when the fetch fails.

Invariant: a task id appears in exactly one list, and that list matches the
task's status.
"""
import logging
import threading
from typing import Dict, List, Optional

from .client import BoardClient
from .events import EventBus
from .schema import Task, TaskStatus, TaskUpdate, NewTask, STATUSES
from .session import SessionStore

logger = logging.getLogger(__name__)


def _empty_groups() -> Dict[TaskStatus, List[Task]]:
    return {status: [] for status in STATUSES}


class TaskCollectionManager:
    """Owns the TaskCollection for one signed-in user."""

    def __init__(self, client: BoardClient, sessions: SessionStore, events: Optional[EventBus] = None):
        self.client = client
        self.sessions = sessions
        self.events = events or EventBus()
        self._groups: Dict[TaskStatus, List[Task]] = _empty_groups()
        # One call-then-patch sequence at a time; later calls win
        self._lock = threading.RLock()

    # ──────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────

    @property
    def tasks(self) -> Dict[TaskStatus, List[Task]]:
        """Snapshot of all three groups."""
        with self._lock:
            return {status: list(group) for status, group in self._groups.items()}

    def group(self, status: TaskStatus) -> List[Task]:
        with self._lock:
            return list(self._groups[TaskStatus.from_str(status)])

    def get(self, task_id: str) -> Optional[Task]:
        found = self._locate(str(task_id))
        return found[2] if found else None

    def counts(self) -> Dict[TaskStatus, int]:
        with self._lock:
            return {status: len(group) for status, group in self._groups.items()}

    @property
    def total(self) -> int:
        return sum(self.counts().values())

    def _locate(self, task_id: str):
        """Return (status, index, task) for the first match, or None."""
        with self._lock:
            for status in STATUSES:
                for index, task in enumerate(self._groups[status]):
                    if task.id == task_id:
                        return status, index, task
        return None

    # ──────────────────────────────────────────
    # Operations
    # ──────────────────────────────────────────

    def load(self) -> Dict[TaskStatus, List[Task]]:
        """
        Replace the board with the server's current task list.

        On failure the board is emptied and the error is re-raised.
        """
        session = self.sessions.require()
        with self._lock:
            try:
                fetched = self.client.fetch_tasks(session.token, session.email)
            except Exception as e:
                logger.error(f"Failed to load tasks: {e}")
                self._groups = _empty_groups()
                raise

            groups = _empty_groups()
            for task in fetched:
                groups[task.status].append(task)
            self._groups = groups
            counts = {status: len(group) for status, group in groups.items()}

        logger.info(
            f"Loaded {len(fetched)} tasks "
            f"({', '.join(f'{s.value}={n}' for s, n in counts.items())})"
        )
        self.events.emit("tasks_loaded", counts=counts)
        return self.tasks

    def create(self, data: NewTask) -> Task:
        """Create a task and append it to the column the server placed it in."""
        session = self.sessions.require()
        with self._lock:
            try:
                task = self.client.create_task(data, session.token, session.email)
            except Exception as e:
                logger.error(f"Failed to create task: {e}")
                raise
            if task.status != data.status:
                logger.warning(
                    f"Task {task.id} was created in {task.status.value}, not {data.status.value}"
                )
            self._groups[task.status].append(task)

        logger.info(f"Created task {task.id} in {task.status.value}")
        self.events.emit("task_created", task=task)
        return task

    def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """
        Apply a partial update and replace the local copy in place.

        If the server reports a different status, the task is moved to the end
        of that column. A task missing locally is left missing (logged).
        """
        session = self.sessions.require()
        task_id = str(task_id)
        with self._lock:
            try:
                task = self.client.update_task(task_id, updates, session.token, session.email)
            except Exception as e:
                logger.error(f"Failed to update task {task_id}: {e}")
                raise

            found = self._locate(task_id)
            if found is None:
                logger.warning(f"Updated task {task_id} is not on the local board; reload to resync")
                return task

            status, index, _ = found
            if task.status == status:
                self._groups[status][index] = task
            else:
                del self._groups[status][index]
                self._groups[task.status].append(task)

        self.events.emit("task_updated", task=task)
        return task

    def delete(self, task_id: str) -> None:
        """Delete a task and drop it from whichever column holds it."""
        session = self.sessions.require()
        task_id = str(task_id)
        with self._lock:
            try:
                self.client.delete_task(task_id, session.token, session.email)
            except Exception as e:
                logger.error(f"Failed to delete task {task_id}: {e}")
                raise

            for status in STATUSES:
                self._groups[status] = [t for t in self._groups[status] if t.id != task_id]

        logger.info(f"Deleted task {task_id}")
        self.events.emit("task_deleted", task_id=task_id)

    def move(self, task_id: str, from_status: TaskStatus, to_status: TaskStatus) -> Optional[Task]:
        """
        Move a task between columns.

        Moving to the same column does nothing and sends nothing. Returns the
        moved task, or None when nothing changed locally.
        """
        from_status = TaskStatus.from_str(from_status)
        to_status = TaskStatus.from_str(to_status)
        if from_status == to_status:
            return None

        session = self.sessions.require()
        task_id = str(task_id)
        with self._lock:
            try:
                self.client.update_task(
                    task_id, TaskUpdate(status=to_status), session.token, session.email
                )
            except Exception as e:
                logger.error(f"Failed to move task {task_id}: {e}")
                raise

            source = self._groups[from_status]
            index = next((i for i, t in enumerate(source) if t.id == task_id), None)
            if index is None:
                logger.warning(
                    f"Task {task_id} moved on the server but was not in {from_status.value} locally"
                )
                return None

            task = source.pop(index)
            task.status = to_status
            self._groups[to_status].append(task)

        logger.info(f"Moved task {task_id}: {from_status.value} → {to_status.value}")
        self.events.emit("task_moved", task=task, from_status=from_status, to_status=to_status)
        return task

    def clear(self) -> None:
        """Drop every task (used on sign-out)."""
        with self._lock:
            self._groups = _empty_groups()
        self.events.emit("tasks_cleared")
