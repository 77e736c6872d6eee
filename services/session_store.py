"""Simple in-memory store for VIS sessions."""

from __future__ import annotations

import asyncio
import random
from typing import Dict, List, Optional
from uuid import uuid4

from models.session_models import INITIAL_MESSAGE_TEXT, MessageRole, SessionState


class SessionStore:
    """Manage VIS sessions and the shared random source used by their flows."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._sessions: Dict[str, SessionState] = {}
        self.rng = rng or random.Random()

    def create(self) -> SessionState:
        """Create a new session greeted by the initial system message."""
        session_id = uuid4().hex
        state = SessionState(session_id=session_id)
        state.add_message(MessageRole.SYSTEM, INITIAL_MESSAGE_TEXT)
        self._sessions[session_id] = state
        return state

    def get(self, session_id: str) -> SessionState:
        """Return a session or raise KeyError if missing."""
        state = self._sessions.get(session_id)
        if state is None:
            raise KeyError(f"Session {session_id} not found")
        return state

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def delete(self, session_id: str) -> SessionState:
        """Remove a session, cancelling any flow it is still running."""
        state = self.get(session_id)
        state.token.cancel()
        if state.flow_task is not None and not state.flow_task.done():
            state.flow_task.cancel()
        del self._sessions[session_id]
        return state

    async def drain(self) -> None:
        """Delete every session and wait for their cancelled flows to unwind."""
        flows = []
        for session_id in self.list_ids():
            state = self.delete(session_id)
            if state.flow_task is not None:
                flows.append(state.flow_task)
        if flows:
            await asyncio.gather(*flows, return_exceptions=True)
