import pytest
from pathlib import Path
from typing import List, Optional
from typer.testing import CliRunner

from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.infrastructure.cache.caching_service import ResponseCache
from acedeck.infrastructure.cli.display import ConsoleDisplay
from acedeck.infrastructure.config.settings import clear_test_config
from acedeck.infrastructure.resilience.credential_pool import CredentialPool

KEY_A = "keyA-0000000000"
KEY_B = "keyB-0000000000"
KEY_C = "keyC-0000000000"


class FakeContentModel(ContentModel):
    """In-memory transport that records every call."""

    provider_name = "fake"
    supports_audio = True
    supports_image = True

    def __init__(self, text: str = "TOPIC: Coulomb's Law\nF = k q1 q2 / r^2"):
        self.text = text
        self.calls: List[tuple] = []

    async def generate_text(self, credential, prompt, system_instruction=None):
        self.calls.append(("text", credential, prompt))
        return self.text

    async def chat(self, credential, system_instruction, history, message):
        self.calls.append(("chat", credential, message))
        return f"reply to {message}"

    async def generate_audio(self, credential, text):
        self.calls.append(("audio", credential, text))
        return b"\x00\x00" * 240

    async def generate_image(self, credential, description) -> Optional[bytes]:
        self.calls.append(("image", credential, description))
        return b"\x89PNG fake"


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()


@pytest.fixture
def mock_console_display(mocker):
    """Mocks the console so commands can be checked without rendering."""
    return mocker.MagicMock(spec=ConsoleDisplay)


@pytest.fixture
def fake_model() -> FakeContentModel:
    return FakeContentModel()


@pytest.fixture
def response_cache(tmp_path: Path):
    cache = ResponseCache(directory=tmp_path / "cache")
    yield cache
    cache.close()


@pytest.fixture
def make_pool():
    """Builds a CredentialPool backed by a fixed comma-separated value."""
    def _make(*keys: str) -> CredentialPool:
        raw = ",".join(keys)
        return CredentialPool(source=lambda: raw, provider="fake")
    return _make
