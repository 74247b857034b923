"""
Tests for the task collection: load, create, update, delete, move.
"""
import pytest

from projects_board.errors import (
    ForbiddenError,
    NotAuthenticatedError,
    NotFoundError,
    TransportError,
    ValidationFailedError,
)
from projects_board.schema import NewTask, TaskPriority, TaskStatus, TaskUpdate, STATUSES

TODO, IN_PROGRESS, DONE = TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE


def ids(tasks):
    return [t.id for t in tasks]


def assert_partitioned(board):
    """Every task sits in exactly one group, and that group matches its status."""
    seen = []
    for status, group in board.tasks.items():
        for task in group:
            assert task.status == status
            seen.append(task.id)
    assert len(seen) == len(set(seen))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# load()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestLoad:

    def test_partitions_by_status_preserving_order(self, signed_in, client):
        a = client.seed("A", "done")
        b = client.seed("B", "todo")
        c = client.seed("C", "in_progress")
        d = client.seed("D", "todo")

        signed_in.board.load()

        tasks = signed_in.board.tasks
        assert ids(tasks[TODO]) == [b, d]
        assert ids(tasks[IN_PROGRESS]) == [c]
        assert ids(tasks[DONE]) == [a]
        assert_partitioned(signed_in.board)

    def test_missing_priority_defaults_to_medium(self, signed_in, client):
        client.seed("No priority", "todo")
        client.seed("Urgent", "done", priority="Critical")

        signed_in.board.load()

        assert signed_in.board.group(TODO)[0].priority == TaskPriority.MEDIUM
        assert signed_in.board.group(DONE)[0].priority == TaskPriority.CRITICAL

    def test_replaces_collection_wholesale(self, signed_in, client):
        old = client.seed("Old", "todo")
        signed_in.board.load()
        client.tasks.clear()
        new = client.seed("New", "done")

        signed_in.board.load()

        assert signed_in.board.get(old) is None
        assert ids(signed_in.board.group(DONE)) == [new]
        assert signed_in.board.total == 1

    def test_failure_resets_to_empty_and_raises(self, signed_in, client):
        client.seed("A", "todo")
        signed_in.board.load()
        client.failures["fetch_tasks"] = TransportError("Failed to fetch tasks", 500)

        with pytest.raises(TransportError):
            signed_in.board.load()

        assert signed_in.board.tasks == {TODO: [], IN_PROGRESS: [], DONE: []}

    def test_requires_session(self, app, client):
        with pytest.raises(NotAuthenticatedError):
            app.board.load()
        assert "fetch_tasks" not in client.called()

    def test_sends_token_and_email(self, signed_in, client):
        signed_in.board.load()
        assert client.calls[-1] == ("fetch_tasks", "token-ada@example.com", "ada@example.com")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# create()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestCreate:

    def test_appends_to_requested_group(self, signed_in, client):
        client.seed("Existing", "in_progress")
        signed_in.board.load()
        before = signed_in.board.total

        task = signed_in.board.create(NewTask(title="Review", status=IN_PROGRESS))

        assert signed_in.board.total == before + 1
        assert signed_in.board.group(IN_PROGRESS)[-1].id == task.id
        assert signed_in.board.group(TODO) == []
        assert_partitioned(signed_in.board)

    def test_created_task_gets_default_priority(self, signed_in):
        task = signed_in.board.create(NewTask(title="Plain"))
        assert task.priority == TaskPriority.MEDIUM
        assert signed_in.board.get(task.id).priority == TaskPriority.MEDIUM

    def test_accepts_wire_status_string(self, signed_in):
        task = signed_in.board.create(NewTask(title="Write report", description="", status="todo"))

        assert ids(signed_in.board.group(TODO)) == [task.id]
        assert task.status == TODO

    def test_server_status_decides_the_group(self, signed_in, client, monkeypatch):
        original = client.create_task

        def create_as_done(data, token, email):
            return original(NewTask(title=data.title, status=DONE), token, email)

        monkeypatch.setattr(client, "create_task", create_as_done)

        task = signed_in.board.create(NewTask(title="Already finished", status=TODO))

        assert signed_in.board.group(TODO) == []
        assert ids(signed_in.board.group(DONE)) == [task.id]
        assert_partitioned(signed_in.board)

    def test_validation_failure_leaves_state(self, signed_in, client):
        client.failures["create_task"] = ValidationFailedError("Title can't be blank")

        with pytest.raises(ValidationFailedError) as exc_info:
            signed_in.board.create(NewTask(title=""))

        assert exc_info.value.status == 422
        assert signed_in.board.total == 0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# update()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestUpdate:

    def test_replaces_in_place(self, signed_in, client):
        first = client.seed("First", "todo")
        second = client.seed("Second", "todo")
        third = client.seed("Third", "todo")
        signed_in.board.load()

        signed_in.board.update(second, TaskUpdate(title="Second (edited)", priority=TaskPriority.HIGH))

        group = signed_in.board.group(TODO)
        assert ids(group) == [first, second, third]
        assert group[1].title == "Second (edited)"
        assert group[1].priority == TaskPriority.HIGH

    def test_status_change_moves_task_to_matching_group(self, signed_in, client):
        task_id = client.seed("Ship it", "todo")
        signed_in.board.load()

        signed_in.board.update(task_id, TaskUpdate(status=DONE))

        assert signed_in.board.group(TODO) == []
        assert ids(signed_in.board.group(DONE)) == [task_id]
        assert_partitioned(signed_in.board)

    def test_unknown_locally_is_a_noop(self, signed_in, client):
        task_id = client.seed("Added elsewhere", "todo")  # never loaded

        task = signed_in.board.update(task_id, TaskUpdate(title="Renamed"))

        assert task.title == "Renamed"
        assert signed_in.board.total == 0

    @pytest.mark.parametrize("error", [NotFoundError(), ForbiddenError()])
    def test_remote_failure_leaves_state(self, signed_in, client, error):
        task_id = client.seed("Keep me", "todo")
        signed_in.board.load()
        client.failures["update_task"] = error

        with pytest.raises(type(error)):
            signed_in.board.update(task_id, TaskUpdate(title="Changed"))

        assert signed_in.board.get(task_id).title == "Keep me"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# delete()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestDelete:

    def test_removes_from_all_groups(self, signed_in, client):
        keep = client.seed("Keep", "todo")
        gone = client.seed("Gone", "in_progress")
        signed_in.board.load()

        signed_in.board.delete(gone)

        assert signed_in.board.get(gone) is None
        assert signed_in.board.total == 1
        assert signed_in.board.get(keep) is not None

    def test_failure_leaves_state(self, signed_in, client):
        task_id = client.seed("Still here", "done")
        signed_in.board.load()
        client.failures["delete_task"] = ForbiddenError()

        with pytest.raises(ForbiddenError):
            signed_in.board.delete(task_id)

        assert signed_in.board.get(task_id) is not None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# move()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestMove:

    def test_same_status_is_a_noop_without_remote_call(self, signed_in, client):
        task_id = client.seed("Stay", "todo")
        signed_in.board.load()
        calls_before = len(client.calls)
        snapshot = signed_in.board.tasks

        assert signed_in.board.move(task_id, TODO, TODO) is None

        assert len(client.calls) == calls_before
        assert signed_in.board.tasks == snapshot

    def test_same_status_needs_no_session(self, app, client):
        assert app.board.move("1", DONE, DONE) is None
        assert client.calls == []

    def test_moves_between_groups(self, signed_in, client):
        moving = client.seed("Moving", "todo")
        client.seed("Other", "done")
        signed_in.board.load()
        total = signed_in.board.total

        task = signed_in.board.move(moving, TODO, IN_PROGRESS)

        assert task.status == IN_PROGRESS
        assert moving not in ids(signed_in.board.group(TODO))
        assert signed_in.board.group(IN_PROGRESS)[-1].id == moving
        assert signed_in.board.total == total
        assert_partitioned(signed_in.board)

    def test_sends_status_update(self, signed_in, client):
        task_id = client.seed("Moving", "todo")
        signed_in.board.load()

        signed_in.board.move(task_id, "todo", "done")

        name, sent_id, updates, _, _ = client.calls[-1]
        assert (name, sent_id) == ("update_task", task_id)
        assert updates.to_payload() == {"status": "done"}

    def test_not_in_source_group_leaves_state(self, signed_in, client):
        task_id = client.seed("Actually done", "done")
        signed_in.board.load()
        snapshot = signed_in.board.tasks

        assert signed_in.board.move(task_id, TODO, IN_PROGRESS) is None

        assert "update_task" in client.called()
        assert signed_in.board.tasks == snapshot

    def test_failure_leaves_state(self, signed_in, client):
        task_id = client.seed("Stuck", "todo")
        signed_in.board.load()
        client.failures["update_task"] = TransportError("Failed to update task (HTTP 502)", 502)

        with pytest.raises(TransportError):
            signed_in.board.move(task_id, TODO, DONE)

        assert ids(signed_in.board.group(TODO)) == [task_id]
        assert signed_in.board.group(DONE) == []

    def test_requires_session(self, app, client):
        with pytest.raises(NotAuthenticatedError):
            app.board.move("1", TODO, DONE)
        assert client.calls == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Scenario + notifications
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_then_move_scenario(signed_in):
    """Empty board → create "Write report" in todo → move it to done."""
    board = signed_in.board

    task = board.create(NewTask(title="Write report", description="", status=TODO))
    assert ids(board.group(TODO)) == [task.id]
    assert board.group(IN_PROGRESS) == []
    assert board.group(DONE) == []

    board.move(task.id, TODO, DONE)
    assert board.group(TODO) == []
    assert board.group(IN_PROGRESS) == []
    done = board.group(DONE)
    assert ids(done) == [task.id]
    assert done[0].status == DONE


def test_every_mutation_emits_one_event(signed_in, client):
    received = []
    signed_in.events.subscribe("*", lambda event, **payload: received.append(event))

    signed_in.board.load()
    task = signed_in.board.create(NewTask(title="Evented"))
    signed_in.board.update(task.id, TaskUpdate(title="Evented again"))
    signed_in.board.move(task.id, TODO, DONE)
    signed_in.board.delete(task.id)
    signed_in.board.clear()

    assert received == [
        "tasks_loaded",
        "task_created",
        "task_updated",
        "task_moved",
        "task_deleted",
        "tasks_cleared",
    ]


def test_clear_empties_every_group(signed_in, client):
    for status in STATUSES:
        client.seed(f"In {status.value}", status.value)
    signed_in.board.load()

    signed_in.board.clear()

    assert signed_in.board.counts() == {TODO: 0, IN_PROGRESS: 0, DONE: 0}
