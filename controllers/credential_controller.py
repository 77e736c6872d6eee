"""Controller for reading and updating stored API credentials."""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from dal.credential_dal import CHAT_API_KEY, IMAGE_API_KEY, CredentialDAL


def credential_dal(request: Request) -> CredentialDAL:
    """Build a CredentialDAL from the shared database initializer and settings."""
    db_initializer = getattr(request.app.state, "db_initializer", None)
    if db_initializer is None:
        raise HTTPException(status_code=500, detail="Database not initialized.")
    return CredentialDAL(db_initializer, request.app.state.settings)


async def get_credential_status(request: Request) -> Dict[str, Any]:
    """Report which credentials are available without revealing them.

    Returns:
        A dict with one boolean per credential name plus `complete`.
    """
    credentials = await credential_dal(request).load()
    return {
        IMAGE_API_KEY: bool(credentials.image_api_key),
        CHAT_API_KEY: bool(credentials.chat_api_key),
        "complete": credentials.complete,
    }


async def update_credentials(
    request: Request,
    image_api_key: Optional[str] = None,
    chat_api_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Store any provided credentials and return the resulting status.

    Raises:
        HTTPException(400) if nothing was provided or a value is blank.
    """
    updates = {IMAGE_API_KEY: image_api_key, CHAT_API_KEY: chat_api_key}
    provided = {name: value for name, value in updates.items() if value is not None}
    if not provided:
        raise HTTPException(status_code=400, detail="No credentials provided.")

    dal = credential_dal(request)
    try:
        for name, value in provided.items():
            await dal.set(name, value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return await get_credential_status(request)
