#!/usr/bin/env python3
"""
Projects Board CLI
──────────────────
Drive the board from a terminal: sign in, list the three columns, and
add / edit / move / delete tasks.

Usage:
    python board_cli.py login --email me@example.com
    python board_cli.py board
    python board_cli.py add "Write report" --status todo --priority High --due 2025-03-01
    python board_cli.py move 12 done
    python board_cli.py logout

Configuration: config.yaml next to this file (see config.example.yaml),
or PROJECTS_BOARD_URL / PROJECTS_BOARD_DB / PROJECTS_BOARD_TIMEOUT.
"""

import argparse
import getpass
import logging
import sys
from datetime import date
from typing import Optional

from projects_board.app import BoardApp
from projects_board.config import BoardConfig
from projects_board.errors import BoardError, NotAuthenticatedError, NotFoundError, ValidationError
from projects_board.schema import NewTask, Task, TaskPriority, TaskStatus, TaskUpdate, STATUSES
from projects_board.validation import validate_login, validate_registration, validate_task_fields

logger = logging.getLogger("board")

STATUS_CHOICES = [s.value for s in TaskStatus]
PRIORITY_CHOICES = [p.value for p in TaskPriority]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Formatting
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def format_task(task: Task) -> str:
    parts = [f"[{task.id}] {task.title}", f"⚡ {task.priority.value}"]
    if task.due_date:
        parts.append(f"📅 {task.due_date.strftime('%b %d').replace(' 0', ' ')}")
    return "  ".join(parts)


def format_board(app: BoardApp) -> str:
    user = app.sessions.user
    total = app.board.total
    lines = [f"📋 {user.company_name or user.email} • {total} task{'s' if total != 1 else ''}"]
    tasks = app.board.tasks
    for status in STATUSES:
        column = tasks[status]
        lines.append(f"── {status.label} ({len(column)}) ──")
        if not column:
            lines.append("  (empty)")
        for task in column:
            lines.append(f"  {format_task(task)}")
    return "\n".join(lines)


def _parse_due(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid due date '{value}', expected YYYY-MM-DD")


def _require_task(app: BoardApp, task_id: str) -> Task:
    task = app.board.get(task_id)
    if task is None:
        raise NotFoundError(f"Task {task_id} is not on your board")
    return task


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Commands
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def cmd_login(app: BoardApp, args) -> str:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    email, password = validate_login(args.email, password)
    session = app.login(email, password)
    return f"✅ Signed in as {session.user.email} ({session.user.company_name})"


def cmd_register(app: BoardApp, args) -> str:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    confirm = password if args.password is not None else getpass.getpass("Confirm password: ")
    registration = validate_registration(args.email, password, confirm, args.company)
    session = app.register(registration)
    return f"✅ Account created, signed in as {session.user.email}"


def cmd_logout(app: BoardApp, args) -> str:
    app.logout()
    return "Signed out."


def cmd_whoami(app: BoardApp, args) -> str:
    user = app.sessions.require().user
    return f"{user.email} ({user.company_name})"


def cmd_board(app: BoardApp, args) -> str:
    app.sessions.require()
    app.board.load()
    return format_board(app)


def cmd_add(app: BoardApp, args) -> str:
    title, description = validate_task_fields(args.title, args.description, require_description=False)
    task = app.board.create(NewTask(
        title=title,
        description=description,
        status=TaskStatus.from_str(args.status),
        due_date=_parse_due(args.due),
        priority=TaskPriority.from_str(args.priority),
    ))
    return f"✅ Added {format_task(task)} to {task.status.label}"


def cmd_edit(app: BoardApp, args) -> str:
    app.sessions.require()
    app.board.load()
    current = _require_task(app, args.task_id)
    title, description = validate_task_fields(
        args.title if args.title is not None else current.title,
        args.description if args.description is not None else current.description,
        require_description=args.description is not None,
    )
    updates = TaskUpdate(
        title=title if args.title is not None else None,
        description=description if args.description is not None else None,
        due_date=_parse_due(args.due),
        priority=TaskPriority.from_str(args.priority) if args.priority else None,
    )
    if not updates.to_payload():
        return "Nothing to change."
    task = app.board.update(current.id, updates)
    return f"✅ Updated {format_task(task)}"


def cmd_move(app: BoardApp, args) -> str:
    app.sessions.require()
    app.board.load()
    current = _require_task(app, args.task_id)
    target = TaskStatus.from_str(args.to_status)
    if current.status == target:
        return f"Task {current.id} is already in {target.label}."
    app.board.move(current.id, current.status, target)
    return f"✅ Moved [{current.id}] {current.title} to {target.label}"


def cmd_delete(app: BoardApp, args) -> str:
    app.sessions.require()
    app.board.load()
    current = _require_task(app, args.task_id)
    app.board.delete(current.id)
    return f"🗑 Deleted [{current.id}] {current.title}"


COMMANDS = {
    "login": cmd_login,
    "register": cmd_register,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "board": cmd_board,
    "add": cmd_add,
    "edit": cmd_edit,
    "move": cmd_move,
    "delete": cmd_delete,
}

# These never need the stored session restored first
NO_RESTORE = {"login", "register", "logout"}
# These load the board themselves so fetch errors surface; whoami needs no tasks
SKIP_INITIAL_LOAD = {"board", "whoami", "edit", "move", "delete"}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Projects Board: kanban tasks from the terminal")
    ap.add_argument("--config", default=None, help="Path to config.yaml")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Sign in")
    p.add_argument("--email", required=True)
    p.add_argument("--password", default=None, help="Prompted for when omitted")

    p = sub.add_parser("register", help="Create an account and sign in")
    p.add_argument("--email", required=True)
    p.add_argument("--company", required=True, help="Company name")
    p.add_argument("--password", default=None, help="Prompted for (twice) when omitted")

    sub.add_parser("logout", help="Sign out and forget the stored session")
    sub.add_parser("whoami", help="Show the signed-in user")
    sub.add_parser("board", help="Show all three columns")

    p = sub.add_parser("add", help="Add a task")
    p.add_argument("title")
    p.add_argument("--description", default="")
    p.add_argument("--status", choices=STATUS_CHOICES, default="todo")
    p.add_argument("--priority", choices=PRIORITY_CHOICES, default="Medium")
    p.add_argument("--due", default=None, help="Due date, YYYY-MM-DD")

    p = sub.add_parser("edit", help="Edit a task")
    p.add_argument("task_id")
    p.add_argument("--title", default=None)
    p.add_argument("--description", default=None)
    p.add_argument("--priority", choices=PRIORITY_CHOICES, default=None)
    p.add_argument("--due", default=None, help="Due date, YYYY-MM-DD")

    p = sub.add_parser("move", help="Move a task to another column")
    p.add_argument("task_id")
    p.add_argument("to_status", choices=STATUS_CHOICES)

    p = sub.add_parser("delete", help="Delete a task")
    p.add_argument("task_id")

    return ap


def run(app: BoardApp, args) -> int:
    """Dispatch one command against an already-built app."""
    try:
        if args.command not in NO_RESTORE:
            app.start(load_tasks=args.command not in SKIP_INITIAL_LOAD)
        print(COMMANDS[args.command](app, args))
    except NotAuthenticatedError:
        print("Error: not signed in. Run: board_cli.py login --email <email>", file=sys.stderr)
        return 1
    except BoardError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = BoardConfig.load(args.config)
    except BoardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [board] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        app = BoardApp.from_config(config)
    except BoardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    with app:
        return run(app, args)


if __name__ == "__main__":
    sys.exit(main())
