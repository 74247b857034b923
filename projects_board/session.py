"""
Session store: owns the signed-in user and their bearer token.

States:
    unauthenticated ──login/register──▶ authenticated ──logout──▶ unauthenticated
    startup ──restore (token still valid)──▶ authenticated
    startup ──restore (token rejected)──▶ unauthenticated, storage cleared
"""
import logging
from typing import Optional

from .client import BoardClient
from .errors import APIError, NotAuthenticatedError, StorageError
from .events import EventBus
from .schema import Identity, Registration, Session
from .storage import SessionStorage

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current Session and keeps it in sync with local storage."""

    def __init__(self, client: BoardClient, storage: SessionStorage, events: Optional[EventBus] = None):
        self.client = client
        self.storage = storage
        self.events = events or EventBus()
        self._session: Optional[Session] = None

    # ──────────────────────────────────────────
    # State
    # ──────────────────────────────────────────

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    @property
    def user(self) -> Optional[Identity]:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return bool(self._session and self._session.token and self._session.user)

    def require(self) -> Session:
        """Return the active session or raise NotAuthenticatedError."""
        if not self.is_authenticated:
            raise NotAuthenticatedError()
        return self._session

    # ──────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────

    def restore(self) -> bool:
        """
        Re-establish a persisted session at startup.

        The stored token is checked against GET /me. If the service rejects
        it (or cannot be reached), stored state is wiped and the store stays
        signed out. Returns True when a session was restored.
        """
        token, user = self.storage.read()
        if not (token and user):
            if token or user:
                logger.warning("Stored session is incomplete, clearing it")
                self._reset()
            return False

        try:
            current = self.client.get_current_user(token)
        except APIError as e:
            logger.warning(f"Stored session is no longer valid ({e.status}), clearing it")
            self._reset()
            return False

        self._session = Session(token=token, user=current)
        logger.info(f"Restored session for {current.email}")
        self.events.emit("session_started", user=current)
        return True

    def login(self, email: str, password: str) -> Session:
        """
        Sign in and persist the session.

        Raises:
            APIError subclass from the client; nothing is written in that case.
            StorageError if the session could not be persisted.
        """
        session = self.client.login(email, password)
        try:
            self.storage.write(session)
        except StorageError:
            logger.error("Could not persist session, staying signed out")
            self._reset()
            raise

        self._session = session
        logger.info(f"Signed in as {session.user.email}")
        self.events.emit("session_started", user=session.user)
        return session

    def register(self, registration: Registration) -> Session:
        """Create the account, then sign in with the same credentials."""
        self.client.register(registration)
        logger.info(f"Registered {registration.email}")
        return self.login(registration.email, registration.password)

    def logout(self) -> None:
        """Forget the session here and on disk."""
        was_signed_in = self.is_authenticated
        self._reset()
        if was_signed_in:
            logger.info("Signed out")
        self.events.emit("session_ended")

    def _reset(self) -> None:
        self._session = None
        try:
            self.storage.clear()
        except StorageError as e:
            logger.error(f"Failed to clear stored session: {e}")
