"""Shared test fixtures: settings env, fake conversation view, fake clock."""

from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from mj_relay.config import Settings, get_settings
from mj_relay.discord.view import ConversationViewError
from mj_relay.models.job import Attachment, Message

TEST_ENV = {
    "DISCORD_TOKEN": "test-token",
    "DISCORD_SERVER_ID": "111",
    "DISCORD_CHANNEL_ID": "222",
    "MAKE_WEBHOOK_URL": "https://hook.example.com/abc",
}


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Provide the required environment and a fresh settings cache per test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    from mj_relay.app import app

    return TestClient(app)


def make_message(msg_id: str, text: str, images: list[str] | None = None) -> Message:
    """Build a Message with the given text and image sources."""
    return Message(
        id=msg_id,
        raw_text=text,
        attachments=[Attachment(locator=src) for src in images or []],
    )


class FakeConversationView:
    """In-memory ConversationView.

    ``timeline`` is a list of ``(visible_from, message)`` pairs; a message is
    listed once the clock reaches ``visible_from``. ``controls`` maps message
    ids to the control labels rendered on them.
    """

    def __init__(self, clock=None, timeline=None, controls=None):
        self.clock = clock
        self.timeline: list[tuple[float, Message]] = list(timeline or [])
        self.controls: dict[str, set[str]] = {k: set(v) for k, v in (controls or {}).items()}
        self.typed: list[str] = []
        self.actions: list[str] = []
        self.activated: list[tuple[str, str]] = []
        self.scans = 0
        self.attachment_reads: list[str] = []
        self.fail_on: set[str] = set()

    def add(self, message: Message, visible_from: float = 0.0) -> Message:
        self.timeline.append((visible_from, message))
        return message

    def _now(self) -> float:
        return self.clock.now if self.clock is not None else 0.0

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise ConversationViewError(f"{operation} failed")

    async def list_messages(self) -> list[Message]:
        self._check("list_messages")
        self.scans += 1
        return [m for visible_from, m in self.timeline if visible_from <= self._now()]

    async def read_text(self, message: Message) -> str:
        self._check("read_text")
        return message.raw_text

    async def read_prompt_text(self, message: Message) -> str | None:
        self._check("read_prompt_text")
        return message.raw_text or None

    async def get_attachments(self, message: Message) -> list[Attachment]:
        self._check("get_attachments")
        self.attachment_reads.append(message.id)
        return list(message.attachments)

    async def find_control(self, message: Message, label: str):
        self._check("find_control")
        if label in self.controls.get(message.id, set()):
            return (message.id, label)
        return None

    async def activate(self, control) -> None:
        self._check("activate")
        self.activated.append(control)

    async def focus_input(self) -> None:
        self._check("focus_input")
        self.actions.append("focus")

    async def submit_text(self, text: str) -> None:
        self._check("submit_text")
        self.typed.append(text)
        self.actions.append(f"type:{text}")

    async def press_enter(self) -> None:
        self._check("press_enter")
        self.actions.append("enter")

    async def wait_for_messages(self, timeout_seconds: float) -> None:
        self._check("wait_for_messages")
        self.actions.append(f"wait_for_messages:{timeout_seconds}")


class FakeClock:
    """Monotonic clock whose async sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def view(fake_clock) -> FakeConversationView:
    return FakeConversationView(clock=fake_clock)


@pytest.fixture
def session_factory(view):
    """Session factory yielding the shared fake view and recording its lifecycle."""
    events: list[str] = []

    @asynccontextmanager
    async def factory(settings):
        events.append("open")
        try:
            yield view
        finally:
            events.append("closed")

    factory.events = events
    return factory


@pytest.fixture
def message():
    """Factory fixture for Message objects: ``message(id, text, images=None)``."""
    return make_message
