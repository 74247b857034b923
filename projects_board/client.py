# Projects Board: HTTP client
#
# Thin wrapper over the REST service. One attempt per call, no retries:
# every failure is classified into an APIError subclass and raised to the
# caller immediately.

import logging
from typing import Optional, Dict, Any, List

import requests

from .schema import Task, Identity, Session, NewTask, TaskUpdate, Registration
from .errors import (
    APIError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}
DEFAULT_TIMEOUT = 10.0  # seconds
NO_RESPONSE_STATUS = 500


def _auth_headers(token: str, email: Optional[str] = None) -> Dict[str, str]:
    headers = {"Authorization": f"Bearer {token}"}
    if email:
        headers["X-User-Email"] = email
    return headers


def _joined_errors(response: requests.Response) -> str:
    """Aggregate a 422 body's field errors into one line."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    errors = body.get("errors")
    if isinstance(errors, list):
        return ", ".join(str(e) for e in errors if e)
    if isinstance(errors, dict):
        parts = []
        for field_name, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                parts.extend(f"{field_name} {m}" for m in messages)
            else:
                parts.append(f"{field_name} {messages}")
        return ", ".join(parts)
    if isinstance(errors, str):
        return errors
    return ""


class BoardClient:
    """HTTP client for the Projects Board API."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session if session is not None else requests.Session()
        self.http.headers.update(DEFAULT_HEADERS)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "BoardClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ──────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        messages: Optional[Dict[int, str]] = None,
    ) -> requests.Response:
        """
        Send one request and return the response if it is 2xx.

        Args:
            fallback: generic message for failures with no specific meaning
            messages: per-status messages that override the defaults

        Raises:
            APIError subclass matching the failure.
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {path}")
        try:
            r = self.http.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(
                f"{fallback}: request timed out after {self.timeout:g}s",
                NO_RESPONSE_STATUS,
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"{fallback}: {e}", NO_RESPONSE_STATUS) from e

        if r.ok:
            return r
        raise self._classify(r, fallback, messages or {})

    def _classify(self, r: requests.Response, fallback: str, messages: Dict[int, str]) -> APIError:
        status = r.status_code
        logger.debug(f"HTTP {status} ({fallback})")
        if status == 401:
            return UnauthorizedError(messages.get(401, "Unauthorized"))
        if status == 403:
            return ForbiddenError(messages.get(403, "You can only access your own tasks"))
        if status == 404:
            return NotFoundError(messages.get(404, "Task not found"))
        if status == 422:
            return ValidationFailedError(_joined_errors(r) or messages.get(422, fallback))
        return TransportError(f"{fallback} (HTTP {status})", status)

    @staticmethod
    def _json(r: requests.Response, fallback: str) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise APIError(f"{fallback}: malformed response", r.status_code) from e

    # ──────────────────────────────────────────
    # Auth
    # ──────────────────────────────────────────

    def login(self, email: str, password: str) -> Session:
        """POST /login → Session."""
        r = self._request(
            "POST", "/login", "Login failed",
            json={"email": email, "password": password},
            messages={401: "Invalid email or password"},
        )
        data = self._json(r, "Login failed")
        if not isinstance(data, dict) or not data.get("token"):
            raise APIError("Login failed: response had no token", r.status_code)
        user = Identity(
            email=str(data.get("email") or email),
            company_name=str(data.get("company_name") or ""),
        )
        return Session(token=str(data["token"]), user=user)

    def register(self, registration: Registration) -> bool:
        """POST /register. Does not sign in."""
        self._request(
            "POST", "/register", "Registration failed",
            json={"user": registration.to_payload()},
            messages={422: "Registration failed"},
        )
        return True

    def get_current_user(self, token: str) -> Identity:
        """GET /me → Identity of the token's owner."""
        r = self._request(
            "GET", "/me", "Failed to get user details",
            headers=_auth_headers(token),
        )
        data = self._json(r, "Failed to get user details")
        try:
            return Identity.from_dict(data if isinstance(data, dict) else {})
        except ValueError as e:
            raise APIError(f"Failed to get user details: {e}", r.status_code) from e

    # ──────────────────────────────────────────
    # Tasks
    # ──────────────────────────────────────────

    def fetch_tasks(self, token: str, email: str) -> List[Task]:
        """GET /tasks → all tasks owned by the user, in server order."""
        r = self._request(
            "GET", "/tasks", "Failed to fetch tasks",
            params={"email": email},
            headers=_auth_headers(token, email),
            messages={
                403: "You are not allowed to view these tasks",
                404: "Task list not found",
            },
        )
        data = self._json(r, "Failed to fetch tasks")
        if not isinstance(data, list):
            raise APIError("Failed to fetch tasks: expected a list", r.status_code)

        tasks = []
        for raw in data:
            try:
                tasks.append(Task.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping task that cannot be placed on the board: {e}")
        return tasks

    def create_task(self, data: NewTask, token: str, email: str) -> Task:
        """POST /tasks → the created task."""
        r = self._request(
            "POST", "/tasks", "Failed to create task",
            json={"task": data.to_payload()},
            params={"email": email},
            headers=_auth_headers(token, email),
            messages={422: "Invalid task data"},
        )
        return self._task(r, "Failed to create task")

    def update_task(self, task_id: str, updates: TaskUpdate, token: str, email: str) -> Task:
        """PATCH /tasks/:id → the updated task."""
        r = self._request(
            "PATCH", f"/tasks/{task_id}", "Failed to update task",
            json={"task": updates.to_payload()},
            params={"email": email},
            headers=_auth_headers(token, email),
            messages={422: "Invalid task data"},
        )
        return self._task(r, "Failed to update task")

    def delete_task(self, task_id: str, token: str, email: str) -> None:
        """DELETE /tasks/:id."""
        self._request(
            "DELETE", f"/tasks/{task_id}", "Failed to delete task",
            params={"email": email},
            headers=_auth_headers(token, email),
        )

    def _task(self, r: requests.Response, fallback: str) -> Task:
        data = self._json(r, fallback)
        try:
            return Task.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise APIError(f"{fallback}: {e}", r.status_code) from e
