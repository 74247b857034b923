"""
Application context: one explicitly owned bundle per running front end.

BoardApp replaces any global state. A front end creates one, calls start(),
and passes it (or its .sessions / .board members) to whatever needs them.
"""
import logging
from typing import Optional

from .client import BoardClient
from .collection import TaskCollectionManager
from .config import BoardConfig
from .errors import APIError
from .events import EventBus
from .schema import Registration, Session
from .session import SessionStore
from .storage import SessionStorage

logger = logging.getLogger(__name__)


class BoardApp:
    """Wires client, storage, session store and task collection together."""

    def __init__(self, client: BoardClient, storage: SessionStorage, events: Optional[EventBus] = None):
        self.client = client
        self.storage = storage
        self.events = events or EventBus()
        self.sessions = SessionStore(client, storage, self.events)
        self.board = TaskCollectionManager(client, self.sessions, self.events)

    @classmethod
    def from_config(cls, config: BoardConfig) -> "BoardApp":
        client = BoardClient(base_url=config.base_url, timeout=config.timeout)
        storage = SessionStorage(config.db_path)
        return cls(client, storage)

    @property
    def is_authenticated(self) -> bool:
        return self.sessions.is_authenticated

    def start(self, load_tasks: bool = True) -> bool:
        """
        Restore a persisted session and load its tasks.

        Returns True when signed in. A failed task load is logged and leaves
        the board empty; the session itself stays valid.
        """
        if not self.sessions.restore():
            return False
        if load_tasks:
            self._load_quietly()
        return True

    def login(self, email: str, password: str) -> Session:
        session = self.sessions.login(email, password)
        self.board.load()
        return session

    def register(self, registration: Registration) -> Session:
        session = self.sessions.register(registration)
        self.board.load()
        return session

    def logout(self) -> None:
        self.sessions.logout()
        self.board.clear()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "BoardApp":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _load_quietly(self) -> None:
        try:
            self.board.load()
        except APIError as e:
            logger.warning(f"Signed in, but tasks could not be loaded: {e}")
