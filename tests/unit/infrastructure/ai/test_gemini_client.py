import asyncio
import base64
import pytest
from unittest.mock import MagicMock, patch

from google.genai import errors

from acedeck.domain.models.errors import FailureKind, UpstreamError
from acedeck.infrastructure.ai.gemini.gemini_client import GeminiClient

CLIENT_PATH = 'acedeck.infrastructure.ai.gemini.gemini_client.genai.Client'
KEY = "AIzaSy-test-key-0001"


def response_with_inline(data):
    part = MagicMock()
    part.inline_data.data = data
    candidate = MagicMock()
    candidate.content.parts = [part]
    response = MagicMock()
    response.candidates = [candidate]
    return response


@pytest.fixture
def sdk_client():
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text="TOPIC: Gauss's Law")
    return client


@patch(CLIENT_PATH)
def test_generate_text_success(mock_constructor, sdk_client):
    """Text requests go to the text model and return the response text."""
    mock_constructor.return_value = sdk_client
    client = GeminiClient()

    result = asyncio.run(client.generate_text(KEY, "Explain Gauss's law", system_instruction="Be brief"))

    assert result == "TOPIC: Gauss's Law"
    mock_constructor.assert_called_once_with(api_key=KEY)
    kwargs = sdk_client.models.generate_content.call_args.kwargs
    assert kwargs['model'] == GeminiClient.DEFAULT_TEXT_MODEL
    assert kwargs['contents'] == "Explain Gauss's law"
    assert kwargs['config'].system_instruction == "Be brief"


@patch(CLIENT_PATH)
def test_sdk_client_is_reused_per_credential(mock_constructor, sdk_client):
    mock_constructor.return_value = sdk_client
    client = GeminiClient()

    asyncio.run(client.generate_text(KEY, "a"))
    asyncio.run(client.generate_text(KEY, "b"))
    asyncio.run(client.generate_text("AIzaSy-test-key-0002", "c"))

    assert mock_constructor.call_count == 2


@patch(CLIENT_PATH)
def test_empty_text_is_reported(mock_constructor, sdk_client):
    sdk_client.models.generate_content.return_value = MagicMock(text="")
    mock_constructor.return_value = sdk_client

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(GeminiClient().generate_text(KEY, "prompt"))

    assert exc_info.value.kind is FailureKind.EMPTY_RESPONSE


@pytest.mark.parametrize("code, kind", [
    (429, FailureKind.RATE_LIMITED),
    (403, FailureKind.INVALID_CREDENTIAL),
    (400, FailureKind.INVALID_CREDENTIAL),
])
@patch(CLIENT_PATH)
def test_client_errors_keep_status_code(mock_constructor, sdk_client, code, kind):
    """Vendor errors are translated with the numeric status preserved."""
    sdk_client.models.generate_content.side_effect = errors.ClientError(
        code, {"error": {"code": code, "message": "upstream said no", "status": "FAILED"}}
    )
    mock_constructor.return_value = sdk_client

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(GeminiClient().generate_text(KEY, "prompt"))

    assert exc_info.value.status_code == code
    assert exc_info.value.kind is kind
    assert isinstance(exc_info.value.__cause__, errors.ClientError)


@patch(CLIENT_PATH)
def test_server_overload_maps_to_overloaded(mock_constructor, sdk_client):
    sdk_client.models.generate_content.side_effect = errors.ServerError(
        503, {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}
    )
    mock_constructor.return_value = sdk_client

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(GeminiClient().generate_text(KEY, "prompt"))

    assert exc_info.value.kind is FailureKind.OVERLOADED


@pytest.mark.parametrize("payload", [b"\x01\x02\x03\x04", base64.b64encode(b"\x01\x02\x03\x04").decode()])
@patch(CLIENT_PATH)
def test_generate_audio_returns_raw_pcm(mock_constructor, sdk_client, payload):
    """Inline audio arrives either as bytes or as base64 text."""
    sdk_client.models.generate_content.return_value = response_with_inline(payload)
    mock_constructor.return_value = sdk_client

    audio = asyncio.run(GeminiClient().generate_audio(KEY, "Namaste doston"))

    assert audio == b"\x01\x02\x03\x04"
    kwargs = sdk_client.models.generate_content.call_args.kwargs
    assert kwargs['model'] == GeminiClient.DEFAULT_AUDIO_MODEL
    assert kwargs['config'].response_modalities == ["AUDIO"]


@patch(CLIENT_PATH)
def test_generate_audio_without_payload_fails(mock_constructor, sdk_client):
    response = MagicMock()
    response.candidates = []
    sdk_client.models.generate_content.return_value = response
    mock_constructor.return_value = sdk_client

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(GeminiClient().generate_audio(KEY, "text"))
    assert exc_info.value.kind is FailureKind.EMPTY_RESPONSE


@patch(CLIENT_PATH)
def test_generate_image_returns_none_without_payload(mock_constructor, sdk_client):
    response = MagicMock()
    response.candidates = []
    sdk_client.models.generate_content.return_value = response
    mock_constructor.return_value = sdk_client

    assert asyncio.run(GeminiClient().generate_image(KEY, "Coulomb's law")) is None


@patch(CLIENT_PATH)
def test_chat_passes_history_and_instruction(mock_constructor, sdk_client):
    session = MagicMock()
    session.send_message.return_value = MagicMock(text="Achha sawaal!")
    sdk_client.chats.create.return_value = session
    mock_constructor.return_value = sdk_client
    history = [
        {"role": "user", "content": "What is flux?"},
        {"role": "model", "content": "Flux is field through area."},
    ]

    reply = asyncio.run(GeminiClient().chat(KEY, "You are AceBot", history, "And Gauss's law?"))

    assert reply == "Achha sawaal!"
    kwargs = sdk_client.chats.create.call_args.kwargs
    assert kwargs['model'] == GeminiClient.DEFAULT_CHAT_MODEL
    assert kwargs['config'].system_instruction == "You are AceBot"
    assert [c.role for c in kwargs['history']] == ["user", "model"]
    session.send_message.assert_called_once_with("And Gauss's law?")
