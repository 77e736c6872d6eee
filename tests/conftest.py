import asyncio
import random
from typing import Callable, Dict, List, Optional

import pytest

from dal.credential_dal import Credentials
from models.session_models import INITIAL_MESSAGE_TEXT, MessageRole, SessionState
from utils.cancellation import CancellationToken
from utils.settings import Settings


class FakeGenerationClient:
    """Stand-in for GenerationClient that records calls and concurrency.

    `responder(prompt, aspect_ratio, reference)` returns a URL or raises.
    Calls go through the cancellation token like the real client does.
    """

    def __init__(
        self,
        token: CancellationToken,
        responder: Optional[Callable] = None,
        chat_responses: Optional[List] = None,
        delay: float = 0,
        close_gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.token = token
        self.close_gate = close_gate
        self.responder = responder or (lambda prompt, ratio, reference: f"https://img.test/{abs(hash(prompt))}.png")
        self.chat_responses = list(chat_responses or [])
        self.delay = delay
        self.calls: List[Dict] = []
        self.chat_calls: List[List[Dict[str, str]]] = []
        self.events: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def generate_image(self, prompt, aspect_ratio="1:1", reference=None):
        return await self.token.run(self._respond(prompt, aspect_ratio, reference))

    async def _respond(self, prompt, aspect_ratio, reference):
        self.calls.append({"prompt": prompt, "aspect_ratio": aspect_ratio, "reference": reference})
        self.events.append(("start", prompt))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return self.responder(prompt, aspect_ratio, reference)
        finally:
            self.in_flight -= 1
            self.events.append(("end", prompt))

    async def chat_completion(self, messages, *, json_mode=True):
        self.chat_calls.append(messages)
        if not self.chat_responses:
            raise RuntimeError("no scripted chat response")
        response = self.chat_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self):
        if self.close_gate is not None:
            await self.close_gate.wait()
        self.closed = True


class FakeClientFactory:
    """Client factory matching `SessionController`'s signature."""

    def __init__(self, responder=None, chat_responses=None, delay: float = 0, close_gate=None) -> None:
        self.responder = responder
        self.chat_responses = chat_responses
        self.delay = delay
        self.close_gate = close_gate
        self.clients: List[FakeGenerationClient] = []

    def __call__(self, credentials, token, settings):
        client = FakeGenerationClient(token, self.responder, self.chat_responses, self.delay, self.close_gate)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeGenerationClient:
        return self.clients[-1]


class StaticCredentials:
    def __init__(self, image_api_key: Optional[str] = "img-key", chat_api_key: Optional[str] = "chat-key") -> None:
        self.credentials = Credentials(image_api_key=image_api_key, chat_api_key=chat_api_key)

    async def load(self) -> Credentials:
        return self.credentials


@pytest.fixture
def settings() -> Settings:
    return Settings(remote_prompting=False)


@pytest.fixture
def state() -> SessionState:
    session = SessionState(session_id="test-session")
    session.add_message(MessageRole.SYSTEM, INITIAL_MESSAGE_TEXT)
    return session


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def credentials() -> StaticCredentials:
    return StaticCredentials()
