"""
Projects Board data model.

Task lifecycle:
  todo → in_progress → done   (any column can move to any other)

Tasks are owned by the server; the client only mirrors what the server
confirmed. Priority is optional on the wire and defaults to Medium.
"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Dict, Any


class TaskStatus(Enum):
    """Board columns, in display order."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_str(cls, value: str) -> "TaskStatus":
        """Parse a wire value. Raises ValueError for unknown columns."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())

    @property
    def label(self) -> str:
        return {
            TaskStatus.TODO: "To Do",
            TaskStatus.IN_PROGRESS: "In Progress",
            TaskStatus.DONE: "Done",
        }[self]


class TaskPriority(Enum):
    """Priorities accepted by the service."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_str(cls, value: Optional[str]) -> "TaskPriority":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.MEDIUM
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return cls.MEDIUM


STATUSES = tuple(TaskStatus)
DEFAULT_PRIORITY = TaskPriority.MEDIUM


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Servers sometimes send a full timestamp; only the calendar day matters
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass
class Task:
    """A card on the board, as confirmed by the server."""

    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None
    priority: TaskPriority = DEFAULT_PRIORITY
    user_id: Optional[Any] = None  # opaque, passed through as sent
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the service's field names."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority.value,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Deserialize a task from a service response.

        Raises ValueError when the id or status is missing or unknown.
        A missing or unrecognised priority becomes Medium, and an unreadable
        date becomes None.
        """
        if data.get("id") is None:
            raise ValueError("Task has no id")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            status=TaskStatus.from_str(data.get("status", "")),
            due_date=_parse_date(data.get("due_date")),
            priority=TaskPriority.from_str(data.get("priority")),
            user_id=data.get("user_id"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class NewTask:
    """Body of a create call."""

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None

    def __post_init__(self):
        self.status = TaskStatus.from_str(self.status)
        if self.priority is not None:
            self.priority = TaskPriority.from_str(self.priority)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
        }
        if self.due_date:
            payload["due_date"] = self.due_date.isoformat()
        if self.priority:
            payload["priority"] = self.priority.value
        return payload


@dataclass
class TaskUpdate:
    """Partial update. Fields left as None are not sent."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None

    def __post_init__(self):
        if self.status is not None:
            self.status = TaskStatus.from_str(self.status)
        if self.priority is not None:
            self.priority = TaskPriority.from_str(self.priority)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.description is not None:
            payload["description"] = self.description
        if self.status is not None:
            payload["status"] = self.status.value
        if self.due_date is not None:
            payload["due_date"] = self.due_date.isoformat()
        if self.priority is not None:
            payload["priority"] = self.priority.value
        return payload


@dataclass(frozen=True)
class Identity:
    """Who is signed in."""
    email: str
    company_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"email": self.email, "company_name": self.company_name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        email = data.get("email")
        if not email:
            raise ValueError("Identity has no email")
        return cls(email=str(email), company_name=str(data.get("company_name") or ""))


@dataclass(frozen=True)
class Session:
    """Bearer token plus the identity it belongs to."""
    token: str
    user: Identity

    @property
    def email(self) -> str:
        return self.user.email


@dataclass
class Registration:
    """Sign-up form contents."""
    email: str
    password: str = field(repr=False)
    company_name: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "email": self.email,
            "password": self.password,
            "company_name": self.company_name,
        }
