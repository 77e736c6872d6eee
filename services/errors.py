"""Domain errors raised by the VIS session flows."""

from __future__ import annotations

from typing import List


class VisError(Exception):
    """Base class for errors surfaced by session operations."""


class CredentialsMissing(VisError):
    """Raised when a flow starts without both API credentials configured."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing API credentials: {', '.join(self.missing)}")


class FlowBusy(VisError):
    """Raised when a flow is requested while another one holds the session gate."""


class EmptyMessage(VisError):
    """Raised when a chat message has no content."""


class NoPendingAction(VisError):
    """Raised when confirming while no action awaits confirmation."""


class LogoRequired(VisError):
    """Raised when an operation needs an uploaded logo."""


class GenerationError(VisError):
    """Raised when the image endpoint returns no usable result."""
