"""Session domain models for VIS generation workflows."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from utils.cancellation import CancellationToken


class ImageKind(str, Enum):
	INITIAL = "initial"
	MODIFICATION = "modification"
	UPLOAD = "upload"


class MessageRole(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"
	SYSTEM = "system"


class ActionKind(str, Enum):
	GENERATE = "GENERATE"
	MODIFY = "MODIFY"
	RANDOM = "RANDOM"


class AspectRatio(str, Enum):
	"""Internal aspect ratio tokens understood by the generation client."""

	SQUARE = "1:1"
	PORTRAIT_3_4 = "3:4"
	LANDSCAPE_4_3 = "4:3"
	PORTRAIT = "9:16"
	WIDESCREEN = "16:9"
	PORTRAIT_2_3 = "2:3"
	LANDSCAPE_3_2 = "3:2"
	PORTRAIT_4_5 = "4:5"
	LANDSCAPE_5_4 = "5:4"
	ULTRAWIDE = "21:9"


@dataclass(frozen=True)
class GeneratedImage:
	"""An immutable gallery entry produced by generation or upload."""

	id: str
	url: str
	prompt: str
	timestamp: int
	kind: ImageKind = ImageKind.INITIAL

	@classmethod
	def create(cls, url: str, prompt: str, kind: ImageKind = ImageKind.INITIAL) -> "GeneratedImage":
		return cls(id=uuid4().hex, url=url, prompt=prompt, timestamp=time.monotonic_ns(), kind=kind)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"url": self.url,
			"prompt": self.prompt,
			"timestamp": self.timestamp,
			"kind": self.kind.value,
		}


@dataclass
class ChatMessage:
	"""Transcript entry; `related_image_id` is a weak reference into the gallery."""

	id: str
	role: MessageRole
	text: str
	related_image_id: Optional[str] = None
	created_at: float = field(default_factory=lambda: time.time())

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"role": self.role.value,
			"text": self.text,
			"related_image_id": self.related_image_id,
			"created_at": self.created_at,
		}


@dataclass(frozen=True)
class DesignAction:
	"""A suggested operation awaiting user confirmation."""

	kind: ActionKind
	label: str
	description: str
	query: str

	def to_dict(self) -> Dict[str, Any]:
		return {
			"kind": self.kind.value,
			"label": self.label,
			"description": self.description,
			"query": self.query,
		}


@dataclass(frozen=True)
class DesignAnalysis:
	"""Conversational reply plus an optional suggested action."""

	reply: str
	suggested_action: Optional[DesignAction] = None


@dataclass(frozen=True)
class GenerationTask:
	"""One image request scheduled by the batch orchestrator."""

	category_name: str
	prompt: str
	variation_label: str = ""
	aspect_ratio: AspectRatio = AspectRatio.SQUARE

	def describe(self) -> str:
		if not self.variation_label:
			return self.category_name
		return f"{self.category_name} ({self.variation_label})"


INITIAL_MESSAGE_TEXT = (
	"SYSTEM ONLINE.\n\n"
	"I am your Automated VIS Generator. Upload a logo to begin.\n\n"
	"I will generate a comprehensive Visual Identity System, testing multiple logo arrangements, "
	"color systems, and a complete typography guide."
)


@dataclass
class SessionState:
	"""In-memory state of one VIS session.

	Attributes:
		session_id: Opaque id assigned by the session store.
		logo: Reference image (data URL or remote URL) the system is built from.
		gallery: Generated images, newest first.
		transcript: Chat messages in insertion order.
		pending_action: At most one action awaiting confirmation.
		edit_target: Image selected as the reference for MODIFY actions.
		analyzing: Gate held while the chat flow runs.
		generating: Gate held while a generation flow runs.
		status_text: Progress narration for the running flow.
		token: Cancellation handle of the current flow.
		flow_id: Incremented on every flow start; used to ignore stale flows.
		flow_task: Background task of the running generation flow, if any.
	"""

	session_id: str
	logo: Optional[str] = None
	gallery: List[GeneratedImage] = field(default_factory=list)
	transcript: List[ChatMessage] = field(default_factory=list)
	pending_action: Optional[DesignAction] = None
	edit_target: Optional[GeneratedImage] = None
	analyzing: bool = False
	generating: bool = False
	status_text: str = ""
	token: CancellationToken = field(default_factory=CancellationToken)
	flow_id: int = 0
	flow_task: Optional[asyncio.Task] = field(default=None, repr=False)

	@property
	def cancelled(self) -> bool:
		return self.token.cancelled

	@property
	def busy(self) -> bool:
		return self.analyzing or self.generating

	def add_message(
		self,
		role: MessageRole,
		text: str,
		related_image_id: Optional[str] = None,
	) -> ChatMessage:
		"""Append a message to the transcript and return it."""
		message = ChatMessage(id=uuid4().hex, role=role, text=text, related_image_id=related_image_id)
		self.transcript.append(message)
		return message

	def prepend_images(self, images: Iterable[GeneratedImage]) -> List[GeneratedImage]:
		"""Insert a batch at the front of the gallery in a single update.

		The batch keeps its own order. Images whose id is already present are
		skipped. Returns the images actually inserted.
		"""
		known = {image.id for image in self.gallery}
		batch: List[GeneratedImage] = []
		for image in images:
			if image.id in known:
				continue
			known.add(image.id)
			batch.append(image)
		if batch:
			self.gallery = batch + self.gallery
		return batch

	def find_image(self, image_id: str) -> GeneratedImage:
		"""Return a gallery image or raise KeyError if missing."""
		for image in self.gallery:
			if image.id == image_id:
				return image
		raise KeyError(f"Image {image_id} not found")

	def begin_flow(self) -> int:
		"""Install a fresh cancellation handle and return the new flow id."""
		self.token = CancellationToken()
		self.flow_id += 1
		return self.flow_id

	def clear(self, logo: Optional[str] = None) -> None:
		"""Reset gallery, transcript and selection state around a new logo."""
		self.logo = logo
		self.gallery = []
		self.transcript = []
		self.pending_action = None
		self.edit_target = None
		self.status_text = ""

	def snapshot(self) -> Dict[str, Any]:
		"""Return a JSON-safe view of the session."""
		return {
			"session_id": self.session_id,
			"logo": self.logo,
			"gallery": [image.to_dict() for image in self.gallery],
			"transcript": [message.to_dict() for message in self.transcript],
			"pending_action": self.pending_action.to_dict() if self.pending_action else None,
			"edit_target_id": self.edit_target.id if self.edit_target else None,
			"analyzing": self.analyzing,
			"generating": self.generating,
			"status_text": self.status_text,
			"cancelled": self.cancelled,
		}
