"""Async Data Access Layer for the CREDENTIAL key-value table.

Provides CredentialDAL with get/set operations compatible with
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from utils.database_init import AsyncDatabaseInitializer
from utils.settings import Settings

IMAGE_API_KEY = "image_api_key"
CHAT_API_KEY = "chat_api_key"
CREDENTIAL_NAMES = (IMAGE_API_KEY, CHAT_API_KEY)


@dataclass(frozen=True)
class Credentials:
    """API keys for the image-generation and chat endpoints."""

    image_api_key: Optional[str] = None
    chat_api_key: Optional[str] = None

    @property
    def missing(self) -> List[str]:
        names = []
        if not self.image_api_key:
            names.append(IMAGE_API_KEY)
        if not self.chat_api_key:
            names.append(CHAT_API_KEY)
        return names

    @property
    def complete(self) -> bool:
        return not self.missing


class CredentialDAL:
    """Data access layer for stored API credentials.

    Stored values take precedence; keys configured in `Settings` (from the
    environment) are used when nothing is stored.
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer, settings: Optional[Settings] = None) -> None:
        self._db = db_initializer
        self._settings = settings or Settings()

    async def get(self, name: str) -> Optional[str]:
        """Return the stored value for `name`, or None if not set."""
        self._check_name(name)
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT value FROM CREDENTIAL WHERE name = ?", (name,))
            row = await cur.fetchone()
            return row[0] if row else None

    async def set(self, name: str, value: str) -> None:
        """Insert or replace the value stored under `name`."""
        self._check_name(name)
        value = (value or "").strip()
        if not value:
            raise ValueError(f"Credential '{name}' must not be empty.")
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO CREDENTIAL (name, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (name, value, int(time.time())),
            )
            await conn.commit()

    async def delete(self, name: str) -> bool:
        """Delete a stored credential. Returns True if a row was deleted."""
        self._check_name(name)
        async with self._db.connection() as conn:
            cur = await conn.execute("DELETE FROM CREDENTIAL WHERE name = ?", (name,))
            await conn.commit()
            return cur.rowcount > 0

    async def load(self) -> Credentials:
        """Return both credentials, falling back to configured environment keys."""
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT name, value FROM CREDENTIAL")
            rows = await cur.fetchall()
        stored: Dict[str, str] = {row[0]: row[1] for row in rows}
        return Credentials(
            image_api_key=stored.get(IMAGE_API_KEY) or self._settings.image_api_key,
            chat_api_key=stored.get(CHAT_API_KEY) or self._settings.chat_api_key,
        )

    @staticmethod
    def _check_name(name: str) -> None:
        if name not in CREDENTIAL_NAMES:
            raise ValueError(f"Unknown credential '{name}'. Expected one of: {', '.join(CREDENTIAL_NAMES)}")
