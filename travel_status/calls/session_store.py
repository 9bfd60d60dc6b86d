"""In-process store of active call sessions.

The mapping is guarded by one lock; each call additionally gets its own
lock, created on demand, which the tracker holds for the whole of an event
so that events for the same call never interleave. A call's lock is dropped
once nobody holds or waits on it and the call is not active. Readers always
get copies, never the live objects.
"""

import asyncio
import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from travel_status.schemas.call_schema import CallSession

logger = logging.getLogger(__name__)


class CallSessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, CallSession] = {}
        self._call_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def call_lock(self, call_id: str) -> AsyncIterator[None]:
        """Hold the lock that serializes events for one call."""
        async with self._lock:
            lock = self._call_locks.setdefault(call_id, asyncio.Lock())
            self._lock_users[call_id] = self._lock_users.get(call_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            async with self._lock:
                self._lock_users[call_id] -= 1
                if self._lock_users[call_id] == 0:
                    del self._lock_users[call_id]
                    if call_id not in self._sessions:
                        del self._call_locks[call_id]

    async def lock_count(self) -> int:
        async with self._lock:
            return len(self._call_locks)

    async def create(self, session: CallSession) -> bool:
        """Add a session. Returns False, leaving the existing one intact, on a duplicate."""
        async with self._lock:
            if session.call_id in self._sessions:
                return False
            self._sessions[session.call_id] = dataclasses.replace(session)
            return True

    async def get(self, call_id: str) -> Optional[CallSession]:
        async with self._lock:
            session = self._sessions.get(call_id)
            return dataclasses.replace(session) if session else None

    async def increment_transcript(self, call_id: str) -> Optional[int]:
        """Bump the transcript count; None when the call is not active."""
        async with self._lock:
            session = self._sessions.get(call_id)
            if session is None:
                return None
            session.transcript_count += 1
            return session.transcript_count

    async def remove(self, call_id: str) -> Optional[CallSession]:
        async with self._lock:
            return self._sessions.pop(call_id, None)

    async def snapshot(self) -> list[CallSession]:
        """Consistent copy of every active session, oldest first."""
        async with self._lock:
            sessions = [dataclasses.replace(s) for s in self._sessions.values()]
        return sorted(sessions, key=lambda s: s.started_at)

    async def count(self) -> int:
        async with self._lock:
            return len(self._sessions)
