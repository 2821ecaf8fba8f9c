"""Session manager for handling multiple address sessions."""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from .session import Session


@dataclass
class SessionEntry:
    """Internal entry storing session and metadata."""

    session: Session
    last_access: float  # Unix timestamp


@dataclass
class AddressLock:
    """Lock for one address and the number of threads using it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class SessionManager:
    """Manages sessions for multiple addresses.

    Provides session storage with automatic timeout cleanup, and one lock
    per address so requests from the same address are handled one at a time.
    """

    def __init__(self, timeout_seconds: int = 300):
        """
        Initialize the session manager.

        Args:
            timeout_seconds: Seconds of inactivity before session expires.
                            Default is 5 minutes.
        """
        self._sessions: dict[str, SessionEntry] = {}
        self._locks: dict[str, AddressLock] = {}
        self._guard = threading.Lock()
        self._timeout = timeout_seconds

    @contextmanager
    def lock(self, address: str) -> Iterator[None]:
        """
        Hold the lock for an address.

        Every request for an address should run inside this block, since
        rendering advances the cursors stored in its session. The lock is
        dropped once no thread holds or waits for it.

        Args:
            address: The session address.
        """
        with self._guard:
            entry = self._locks.setdefault(address, AddressLock())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[address]

    def get_session(self, address: str) -> Session:
        """
        Get or create a session for an address.

        If the address doesn't have a session, a new one is created.
        Accessing a session refreshes its last access time.

        Args:
            address: The session address (e.g., "!abcd1234").

        Returns:
            The session for this address.
        """
        with self._guard:
            if address not in self._sessions:
                self._sessions[address] = SessionEntry(
                    session=Session(address=address),
                    last_access=time.time(),
                )
            else:
                self._sessions[address].last_access = time.time()

            return self._sessions[address].session

    def find_session(self, address: str) -> Session | None:
        """Get an address's session without creating or refreshing it."""
        with self._guard:
            entry = self._sessions.get(address)
            return entry.session if entry else None

    def update_session(self, address: str, session: Session) -> None:
        """
        Update the session for an address.

        Also refreshes the last access time.

        Args:
            address: The session address.
            session: The new session state.
        """
        with self._guard:
            self._sessions[address] = SessionEntry(
                session=session,
                last_access=time.time(),
            )

    def remove_session(self, address: str) -> None:
        """
        Remove an address's session.

        Args:
            address: The session address.
        """
        with self._guard:
            self._sessions.pop(address, None)

    def cleanup_expired(self) -> int:
        """
        Remove expired sessions.

        Returns:
            Number of sessions removed.
        """
        now = time.time()
        with self._guard:
            expired = [
                address
                for address, entry in self._sessions.items()
                if now - entry.last_access > self._timeout
            ]

            for address in expired:
                del self._sessions[address]

        return len(expired)

    def session_count(self) -> int:
        """Get the number of active sessions."""
        with self._guard:
            return len(self._sessions)

    def list_addresses(self) -> list[str]:
        """Get list of all addresses with active sessions."""
        with self._guard:
            return list(self._sessions.keys())
