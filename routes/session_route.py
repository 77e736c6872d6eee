"""FastAPI routes for VIS sessions."""

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.credential_controller import credential_dal
from controllers.session_controller import SessionController
from models.session_models import SessionState
from services.errors import (
	CredentialsMissing,
	EmptyMessage,
	FlowBusy,
	LogoRequired,
	NoPendingAction,
)
from services.session_store import SessionStore
from utils.media_validation import read_image_reference

router = APIRouter(prefix="/sessions", tags=["sessions"])


class MessagePayload(BaseModel):
	text: str


class EditTargetPayload(BaseModel):
	image_id: str


def _store(request: Request) -> SessionStore:
	store = getattr(request.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


def _session(request: Request, session_id: str) -> SessionState:
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


def _controller(request: Request, session_id: str) -> SessionController:
	state = _session(request, session_id)
	return SessionController(
		state,
		credential_dal(request),
		settings=request.app.state.settings,
		client_factory=getattr(request.app.state, "client_factory", None),
		rng=_store(request).rng,
	)


def _http_error(exc: Exception) -> HTTPException:
	"""Translate session errors into HTTP responses."""
	if isinstance(exc, CredentialsMissing):
		return HTTPException(
			status_code=428,
			detail={"credentials_required": True, "missing": exc.missing, "message": str(exc)},
		)
	if isinstance(exc, FlowBusy):
		return HTTPException(status_code=409, detail=str(exc))
	if isinstance(exc, (EmptyMessage, NoPendingAction, LogoRequired, ValueError)):
		return HTTPException(status_code=400, detail=str(exc))
	if isinstance(exc, KeyError):
		return HTTPException(status_code=404, detail=str(exc.args[0]) if exc.args else "Not found")
	return HTTPException(status_code=500, detail=str(exc))


@router.post("", status_code=201)
async def create_session_route(request: Request):
	"""Create a new session greeted by the initial system message."""
	return _store(request).create().snapshot()


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	"""Return the session snapshot: gallery, transcript, gates and status."""
	return _session(request, session_id).snapshot()


@router.delete("/{session_id}")
async def delete_session_route(request: Request, session_id: str):
	try:
		_store(request).delete(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "deleted": True}


@router.post("/{session_id}/logo", status_code=202)
async def upload_logo_route(
	request: Request,
	session_id: str,
	file: Optional[UploadFile] = File(None),
	url: Optional[str] = Form(None),
):
	"""Store the logo and start the two-phase VIS generation in the background."""
	controller = _controller(request, session_id)
	logo = await read_image_reference(file, url)
	try:
		await controller.start_upload(logo)
	except HTTPException:
		raise
	except Exception as exc:
		raise _http_error(exc) from exc
	return controller.state.snapshot()


@router.post("/{session_id}/messages")
async def post_message_route(request: Request, session_id: str, payload: MessagePayload):
	"""Analyze a chat message and return the updated session."""
	controller = _controller(request, session_id)
	try:
		await controller.send_message(payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise _http_error(exc) from exc
	return controller.state.snapshot()


@router.post("/{session_id}/actions/confirm", status_code=202)
async def confirm_action_route(request: Request, session_id: str):
	"""Start executing the pending action in the background."""
	controller = _controller(request, session_id)
	try:
		await controller.start_confirm()
	except HTTPException:
		raise
	except Exception as exc:
		raise _http_error(exc) from exc
	return controller.state.snapshot()


@router.post("/{session_id}/actions/random")
async def random_action_route(request: Request, session_id: str):
	controller = _controller(request, session_id)
	try:
		controller.trigger_random()
	except Exception as exc:
		raise _http_error(exc) from exc
	return controller.state.snapshot()


@router.delete("/{session_id}/actions/pending")
async def dismiss_action_route(request: Request, session_id: str):
	controller = _controller(request, session_id)
	dismissed = controller.dismiss_action()
	return {"dismissed": dismissed, "session": controller.state.snapshot()}


@router.post("/{session_id}/cancel")
async def cancel_route(request: Request, session_id: str):
	"""Abort the running flow and its in-flight requests."""
	controller = _controller(request, session_id)
	cancelled = controller.cancel()
	return {"cancelled": cancelled, "session": controller.state.snapshot()}


@router.post("/{session_id}/edit-target")
async def select_edit_target_route(request: Request, session_id: str, payload: EditTargetPayload):
	controller = _controller(request, session_id)
	try:
		controller.select_for_edit(payload.image_id)
	except Exception as exc:
		raise _http_error(exc) from exc
	return controller.state.snapshot()


@router.delete("/{session_id}/edit-target")
async def clear_edit_target_route(request: Request, session_id: str):
	controller = _controller(request, session_id)
	controller.clear_edit_selection()
	return controller.state.snapshot()


@router.post("/{session_id}/images", status_code=201)
async def add_image_route(
	request: Request,
	session_id: str,
	file: Optional[UploadFile] = File(None),
	url: Optional[str] = Form(None),
):
	"""Add a user-supplied image to the gallery."""
	controller = _controller(request, session_id)
	reference = await read_image_reference(file, url)
	try:
		image = controller.add_upload(reference)
	except Exception as exc:
		raise _http_error(exc) from exc
	return image.to_dict()


@router.get("/{session_id}/images/{image_id}")
async def get_image_route(request: Request, session_id: str, image_id: str):
	state = _session(request, session_id)
	try:
		return state.find_image(image_id).to_dict()
	except KeyError as exc:
		raise _http_error(exc) from exc


@router.post("/{session_id}/reset")
async def reset_route(request: Request, session_id: str):
	"""Drop the logo and all generated assets."""
	controller = _controller(request, session_id)
	controller.reset()
	return controller.state.snapshot()
