"""FastAPI routes for the API credential store."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.credential_controller import get_credential_status, update_credentials

router = APIRouter(prefix="/credentials", tags=["credentials"])


class CredentialPayload(BaseModel):
    image_api_key: Optional[str] = None
    chat_api_key: Optional[str] = None


@router.get("")
async def get_credentials_route(request: Request):
    """Report which API keys are configured."""
    try:
        return await get_credential_status(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.put("")
async def put_credentials_route(request: Request, payload: CredentialPayload):
    """Store the image-generation and/or chat API keys."""
    try:
        return await update_credentials(request, payload.image_api_key, payload.chat_api_key)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
