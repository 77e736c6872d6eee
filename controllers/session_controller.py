"""Session flows: logo upload, chat analysis, action confirmation and cancellation."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Protocol, Tuple

from dal.credential_dal import Credentials
from models.session_models import (
	INITIAL_MESSAGE_TEXT,
	ActionKind,
	AspectRatio,
	DesignAction,
	DesignAnalysis,
	GeneratedImage,
	GenerationTask,
	ImageKind,
	MessageRole,
	SessionState,
)
from models.vis_categories import RANDOM_ASPECT_RATIOS, RANDOM_PROMPTS
from services.batch_orchestrator import BatchOrchestrator
from services.errors import (
	CredentialsMissing,
	EmptyMessage,
	FlowBusy,
	GenerationError,
	LogoRequired,
	NoPendingAction,
)
from services.openai.generation_client import GenerationClient
from services.openai.prompts import edit_prompt
from services.prompt_analyzer import PromptAnalyzer
from services.prompt_expander import CreativePromptExpander
from services.task_builder import (
	APPLICATION_PHASE_LABEL,
	BASIC_PHASE_LABEL,
	build_application_tasks,
	build_basic_tasks,
)
from utils.cancellation import CancellationToken, GenerationAborted
from utils.settings import Settings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Credentials, CancellationToken, Settings], GenerationClient]

UPLOAD_STARTED_TEXT = (
	"SOURCE LOGO ACQUIRED. INITIALIZING MULTI-BATCH GENERATION...\n\n"
	"PHASE 1: DIVERSE BASIC ELEMENTS (30+ Variations)\n"
	"PHASE 2: APPLICATION SCENARIOS (16+ Mockups)"
)
UPLOAD_FAILED_TEXT = "GENERATION SEQUENCE INTERRUPTED. PLEASE CHECK YOUR CONNECTION."
COMMUNICATION_ERROR_TEXT = "COMMUNICATION ERROR. PLEASE TRY AGAIN."
ACTION_BLOCKED_TEXT = "ACTION BLOCKED: PLEASE UPLOAD A LOGO FIRST."
GENERATION_FAILED_TEXT = "GENERATION FAILED."
MODIFICATION_COMPLETE_TEXT = "MODIFICATION COMPLETE."
TERMINATED_TEXT = "GENERATION TERMINATED BY USER."


def _upload_complete_text(count: int) -> str:
	return (
		"SYSTEM GENERATION COMPLETE.\n\n"
		f"Total of {count} high-fidelity brand assets generated.\n"
		"You can now select any image to download or refine it further."
	)


class CredentialSource(Protocol):
	"""Anything exposing `async load() -> Credentials`, e.g. `CredentialDAL`."""

	async def load(self) -> Credentials: ...


class SessionController:
	"""Sequence user operations over one `SessionState`.

	The controller is the only writer of the session's transcript. Generation
	flows hold the `generating` gate and the chat flow holds `analyzing`;
	either gate rejects new submissions with `FlowBusy`. Each flow runs with
	its own cancellation handle, installed when the flow starts.
	"""

	def __init__(
		self,
		state: SessionState,
		credentials: CredentialSource,
		settings: Optional[Settings] = None,
		client_factory: Optional[ClientFactory] = None,
		rng: Optional[random.Random] = None,
	) -> None:
		self.state = state
		self.credentials = credentials
		self.settings = settings or Settings()
		self.client_factory = client_factory or GenerationClient.from_credentials
		self.rng = rng or random.Random()

	# ------------------------------------------------------------------
	# Upload flow
	# ------------------------------------------------------------------

	async def start_upload(self, logo: str) -> asyncio.Task:
		"""Reset the session around `logo` and schedule the two-phase generation.

		Raises:
			LogoRequired: If `logo` is empty.
			CredentialsMissing: If either API key is absent.
			FlowBusy: If another flow holds a gate.
		"""
		logo = (logo or "").strip()
		if not logo:
			raise LogoRequired("A logo image is required.")
		self._check_idle()
		credentials = await self._require_credentials()
		flow_id, token = self._enter("generating")

		self.state.clear(logo=logo)
		self.state.add_message(MessageRole.SYSTEM, UPLOAD_STARTED_TEXT)
		return self._schedule(self._run_upload(credentials, logo, flow_id, token))

	async def upload_logo(self, logo: str) -> None:
		"""Run the upload flow to completion."""
		task = await self.start_upload(logo)
		await task

	async def _run_upload(self, credentials: Credentials, logo: str, flow_id: int, token: CancellationToken) -> None:
		client: Optional[GenerationClient] = None
		try:
			client = self.client_factory(credentials, token, self.settings)
			orchestrator = BatchOrchestrator(client, token, self.settings.batch_size)
			basics = await orchestrator.run(build_basic_tasks(), logo, BASIC_PHASE_LABEL, self.state)
			mockups = await orchestrator.run(build_application_tasks(), logo, APPLICATION_PHASE_LABEL, self.state)
			total = len(basics) + len(mockups)
			logger.info("Upload flow %d finished with %d assets", flow_id, total)
			self.state.add_message(MessageRole.SYSTEM, _upload_complete_text(total))
		except GenerationAborted:
			logger.info("Upload flow %d terminated by user", flow_id)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			self._fail(token, exc, UPLOAD_FAILED_TEXT)
		finally:
			if client is not None:
				await client.aclose()
			self._leave(flow_id, "generating")

	# ------------------------------------------------------------------
	# Chat flow
	# ------------------------------------------------------------------

	async def send_message(self, text: str) -> Optional[DesignAnalysis]:
		"""Append a user message, analyze it and record the reply.

		Returns the analysis, or None when the flow failed or was cancelled.

		Raises:
			EmptyMessage: If `text` is blank.
			FlowBusy: If another flow holds a gate.
			CredentialsMissing: If either API key is absent.
		"""
		message = (text or "").strip()
		if not message:
			raise EmptyMessage("Message must not be empty.")
		self._check_idle()
		credentials = await self._require_credentials()
		flow_id, token = self._enter("analyzing")

		self.state.pending_action = None
		self.state.add_message(MessageRole.USER, message)
		self.state.status_text = "ANALYZING REQUEST..."

		client: Optional[GenerationClient] = None
		try:
			client = self.client_factory(credentials, token, self.settings)
			analyzer = PromptAnalyzer(client, remote=self.settings.remote_prompting)
			analysis = await analyzer.analyze(
				message,
				has_logo=self.state.logo is not None,
				has_edit_target=self.state.edit_target is not None,
			)
			token.raise_if_cancelled()
			self._apply_analysis(analysis)
			return analysis
		except GenerationAborted:
			logger.info("Chat flow %d terminated by user", flow_id)
			return None
		except Exception as exc:  # pylint: disable=broad-exception-caught
			self._fail(token, exc, COMMUNICATION_ERROR_TEXT)
			return None
		finally:
			if client is not None:
				await client.aclose()
			self._leave(flow_id, "analyzing")

	def _apply_analysis(self, analysis: DesignAnalysis) -> None:
		self.state.add_message(MessageRole.ASSISTANT, analysis.reply)
		action = analysis.suggested_action
		if action is None:
			return
		if self.state.logo is None:
			self.state.add_message(MessageRole.SYSTEM, ACTION_BLOCKED_TEXT)
		else:
			self.state.pending_action = action

	# ------------------------------------------------------------------
	# Action confirmation flow
	# ------------------------------------------------------------------

	async def start_confirm(self) -> asyncio.Task:
		"""Consume the pending action and schedule its execution.

		Raises:
			NoPendingAction: If nothing awaits confirmation.
			LogoRequired: If no logo was uploaded.
			FlowBusy: If another flow holds a gate.
			CredentialsMissing: If either API key is absent.
		"""
		if self.state.pending_action is None:
			raise NoPendingAction("There is no action to confirm.")
		if self.state.logo is None:
			raise LogoRequired("Upload a logo before running design actions.")
		self._check_idle()
		credentials = await self._require_credentials()

		action = self.state.pending_action
		if action is None:
			raise NoPendingAction("The pending action was dismissed.")
		flow_id, token = self._enter("generating")
		self.state.pending_action = None

		edit_target = self.state.edit_target if action.kind is ActionKind.MODIFY else None
		return self._schedule(
			self._run_action(credentials, action, self.state.logo, edit_target, flow_id, token)
		)

	async def confirm_action(self) -> None:
		"""Run the pending action to completion."""
		task = await self.start_confirm()
		await task

	async def _run_action(
		self,
		credentials: Credentials,
		action: DesignAction,
		logo: str,
		edit_target: Optional[GeneratedImage],
		flow_id: int,
		token: CancellationToken,
	) -> None:
		client: Optional[GenerationClient] = None
		try:
			client = self.client_factory(credentials, token, self.settings)
			if action.kind is ActionKind.MODIFY and edit_target is not None:
				await self._modify(client, action, edit_target, token)
			else:
				await self._generate(client, action, logo, token)
		except GenerationAborted:
			logger.info("Action flow %d (%s) terminated by user", flow_id, action.kind.value)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			self._fail(token, exc, GENERATION_FAILED_TEXT)
		finally:
			if client is not None:
				await client.aclose()
			if (
				action.kind is ActionKind.MODIFY
				and self.state.flow_id == flow_id
				and self.state.edit_target is edit_target
			):
				self.clear_edit_selection()
			self._leave(flow_id, "generating")

	async def _modify(
		self,
		client: GenerationClient,
		action: DesignAction,
		edit_target: GeneratedImage,
		token: CancellationToken,
	) -> None:
		self.state.status_text = f"MODIFYING ASSET: {action.label.upper()}..."
		url = await client.generate_image(edit_prompt(action.query), AspectRatio.SQUARE, edit_target.url)
		token.raise_if_cancelled()

		image = GeneratedImage.create(url=url, prompt=f"Edit: {action.query}", kind=ImageKind.MODIFICATION)
		self.state.prepend_images([image])
		self.state.add_message(MessageRole.SYSTEM, MODIFICATION_COMPLETE_TEXT, related_image_id=image.id)

	async def _generate(
		self,
		client: GenerationClient,
		action: DesignAction,
		logo: str,
		token: CancellationToken,
	) -> None:
		is_random = action.kind is ActionKind.RANDOM
		self.state.status_text = "BRAINSTORMING RANDOM CONCEPTS..." if is_random else "DESIGNING VARIATIONS..."
		seed = self.rng.choice(RANDOM_PROMPTS) if is_random else action.query

		expander = CreativePromptExpander(client, remote=self.settings.remote_prompting)
		prompts = await expander.expand(seed)
		token.raise_if_cancelled()

		tasks = [
			GenerationTask(
				category_name=prompt,
				prompt=prompt,
				aspect_ratio=self.rng.choice(RANDOM_ASPECT_RATIOS) if is_random else AspectRatio.SQUARE,
			)
			for prompt in prompts
		]
		self.state.status_text = f"RENDERING {len(tasks)} ASSETS..."
		# The set is small, so every call is issued at once.
		orchestrator = BatchOrchestrator(client, token, max(len(tasks), 1))
		images = await orchestrator.settle(tasks, logo)
		token.raise_if_cancelled()

		if not images:
			raise GenerationError("Generation produced no valid results.")
		self.state.prepend_images(images)
		self.state.add_message(
			MessageRole.SYSTEM,
			f"GENERATION COMPLETE: {len(images)} NEW ASSETS.",
			related_image_id=images[0].id,
		)

	# ------------------------------------------------------------------
	# Cancellation and selection
	# ------------------------------------------------------------------

	def cancel(self) -> bool:
		"""Abort the running flow. Returns False when nothing was running."""
		if not self.state.busy:
			return False
		logger.info("Cancelling flow %d of session %s", self.state.flow_id, self.state.session_id)
		self.state.token.cancel()
		self.state.analyzing = False
		self.state.generating = False
		self.state.pending_action = None
		self.state.status_text = ""
		self.state.add_message(MessageRole.SYSTEM, TERMINATED_TEXT)
		return True

	def select_for_edit(self, image_id: str) -> GeneratedImage:
		"""Make a gallery image the reference for MODIFY actions.

		Raises:
			KeyError: If the image is not in the gallery.
		"""
		image = self.state.find_image(image_id)
		self.state.edit_target = image
		self.state.add_message(
			MessageRole.SYSTEM,
			f"EDIT MODE ENGAGED (ID #{image.id[-4:]}).\n"
			'Tell me what to change (e.g., "Make it gold", "Change background to red").',
			related_image_id=image.id,
		)
		return image

	def clear_edit_selection(self) -> None:
		self.state.edit_target = None
		self.state.pending_action = None

	def dismiss_action(self) -> bool:
		"""Drop the pending action. Returns False if there was none."""
		had_action = self.state.pending_action is not None
		self.state.pending_action = None
		return had_action

	def trigger_random(self) -> DesignAction:
		"""Offer a "surprise me" action without going through the analyzer."""
		if self.state.logo is None:
			raise LogoRequired("Upload a logo before asking for a surprise.")
		self._check_idle()
		action = DesignAction(
			kind=ActionKind.RANDOM,
			label="Surprise Me",
			description="Generate a completely random, high-quality brand asset.",
			query="random",
		)
		self.state.pending_action = action
		return action

	def add_upload(self, url: str) -> GeneratedImage:
		"""Add a user-supplied image to the gallery so it can be edited."""
		url = (url or "").strip()
		if not url:
			raise ValueError("Image reference must not be empty.")
		image = GeneratedImage.create(url=url, prompt="Uploaded image", kind=ImageKind.UPLOAD)
		self.state.prepend_images([image])
		return image

	def reset(self) -> None:
		"""Drop the logo and everything generated from it, stopping any running flow."""
		if self.state.busy:
			self.state.token.cancel()
		self.state.begin_flow()
		self.state.analyzing = False
		self.state.generating = False
		self.state.flow_task = None
		self.state.clear(logo=None)
		self.state.add_message(MessageRole.SYSTEM, INITIAL_MESSAGE_TEXT)

	# ------------------------------------------------------------------
	# Helpers
	# ------------------------------------------------------------------

	async def _require_credentials(self) -> Credentials:
		credentials = await self.credentials.load()
		if not credentials.complete:
			raise CredentialsMissing(credentials.missing)
		return credentials

	def _check_idle(self) -> None:
		if self.state.busy:
			raise FlowBusy("Another operation is in progress.")

	def _enter(self, gate: str) -> Tuple[int, CancellationToken]:
		"""Take `gate` and install a fresh cancellation handle for the new flow."""
		self._check_idle()
		setattr(self.state, gate, True)
		flow_id = self.state.begin_flow()
		return flow_id, self.state.token

	def _leave(self, flow_id: int, gate: str) -> None:
		# A flow superseded by cancel or reset must not touch the new flow's gates.
		if self.state.flow_id != flow_id:
			return
		setattr(self.state, gate, False)
		self.state.status_text = ""

	def _schedule(self, flow: Awaitable[None]) -> asyncio.Task:
		task = asyncio.ensure_future(flow)
		self.state.flow_task = task
		return task

	def _fail(self, token: CancellationToken, exc: Exception, text: str) -> None:
		if token.cancelled:
			logger.info("Ignoring failure of a cancelled flow: %s", exc)
			return
		logger.error("Session %s flow failed: %s", self.state.session_id, exc)
		self.state.add_message(MessageRole.SYSTEM, text)
