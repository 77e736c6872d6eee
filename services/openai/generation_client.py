"""Image generation and chat completion calls against OpenAI-compatible endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from openai import AsyncOpenAI

from dal.credential_dal import Credentials
from models.session_models import AspectRatio
from services.errors import GenerationError
from services.openai.prompts import with_reference
from services.openai.response_parser import extract_message_content
from services.openai.size_tokens import to_size_token
from utils.cancellation import CancellationToken
from utils.settings import Settings

logger = logging.getLogger(__name__)


class GenerationClient:
    """Thin request/response mapping to the image and chat endpoints.

    Every network call goes through the session's `CancellationToken`, so a
    user cancellation aborts it and surfaces `GenerationAborted` instead of a
    generic network error.
    """

    def __init__(
        self,
        image_client: AsyncOpenAI,
        chat_client: AsyncOpenAI,
        token: CancellationToken,
        settings: Optional[Settings] = None,
    ) -> None:
        if image_client is None or chat_client is None:
            raise ValueError("AsyncOpenAI clients are required.")
        self.image_client = image_client
        self.chat_client = chat_client
        self.token = token
        self.settings = settings or Settings()

    @classmethod
    def from_credentials(
        cls, credentials: Credentials, token: CancellationToken, settings: Settings
    ) -> "GenerationClient":
        """Build a client pair from stored credentials and configured endpoints."""
        image_client = AsyncOpenAI(api_key=credentials.image_api_key, base_url=settings.image_base_url)
        chat_client = AsyncOpenAI(api_key=credentials.chat_api_key, base_url=settings.chat_base_url)
        return cls(image_client, chat_client, token, settings)

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.SQUARE,
        reference: Optional[str] = None,
    ) -> str:
        """Request one image and return its URL.

        Args:
            prompt: Generation prompt.
            aspect_ratio: Internal ratio token, mapped to the provider size token.
            reference: Optional reference image (logo or edit target).

        Raises:
            GenerationAborted: If the session was cancelled.
            GenerationError: If the endpoint returned no image.
        """
        full_prompt = with_reference(prompt, reference) if reference else prompt
        response = await self.token.run(
            self.image_client.images.generate(
                model=self.settings.image_model,
                prompt=full_prompt,
                n=1,
                size=to_size_token(aspect_ratio),
                response_format="url",
                quality=self.settings.image_quality,
            )
        )
        data = getattr(response, "data", None) or []
        if not data:
            raise GenerationError("Image endpoint returned no images.")
        url = getattr(data[0], "url", None)
        if not url:
            raise GenerationError("Image endpoint returned an image without a URL.")
        return url

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        *,
        json_mode: bool = True,
    ) -> str:
        """Send a chat completion and return the first choice's content."""
        kwargs: Dict[str, Any] = {
            "model": self.settings.chat_model,
            "messages": messages,
            "temperature": self.settings.chat_temperature,
            "max_tokens": self.settings.chat_max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self.token.run(self.chat_client.chat.completions.create(**kwargs))
        return extract_message_content(response)

    async def aclose(self) -> None:
        """Close both underlying HTTP clients."""
        for client in (self.image_client, self.chat_client):
            try:
                await client.close()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                # Shutdown errors must not mask the flow outcome.
                logger.debug("Ignoring error while closing client: %s", exc)
