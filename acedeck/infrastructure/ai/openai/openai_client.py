"""Concrete implementation of the ContentModel interface using the OpenAI API.

Hides the specifics of the OpenAI client library and translates requests/
responses between the domain model and the OpenAI API format.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional

from openai import APIConnectionError, APIStatusError, OpenAI

from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.domain.models.common import ChatMessage, Credential
from acedeck.domain.models.errors import FailureKind, UpstreamError

logger = logging.getLogger(__name__)


def to_chat_messages(system_instruction: Optional[str], history: List[ChatMessage], message: str) -> List[Dict[str, str]]:
    """Builds an OpenAI-style message list; the 'model' role becomes 'assistant'."""
    messages: List[Dict[str, str]] = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    for turn in history:
        role = "assistant" if turn["role"] in ("model", "assistant") else "user"
        messages.append({"role": role, "content": turn["content"]})
    messages.append({"role": "user", "content": message})
    return messages


def completion_text(response: Any) -> Optional[str]:
    """Extracts the first choice's content, or None if the response has none."""
    try:
        return response.choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        return None


class OpenAIClient(ContentModel):
    """OpenAI implementation of the ContentModel interface."""

    provider_name = "openai"
    supports_audio = True
    supports_image = True

    DEFAULT_TEXT_MODEL = "gpt-4o-mini"
    DEFAULT_AUDIO_MODEL = "gpt-4o-mini-tts"
    DEFAULT_IMAGE_MODEL = "gpt-image-1"
    DEFAULT_CHAT_MODEL = "gpt-4o-mini"
    VOICE_NAME = "alloy"
    IMAGE_SIZE = "1536x1024"

    def __init__(
        self,
        text_model: Optional[str] = None,
        audio_model: Optional[str] = None,
        image_model: Optional[str] = None,
        chat_model: Optional[str] = None,
    ):
        self.text_model = text_model or self.DEFAULT_TEXT_MODEL
        self.audio_model = audio_model or self.DEFAULT_AUDIO_MODEL
        self.image_model = image_model or self.DEFAULT_IMAGE_MODEL
        self.chat_model = chat_model or self.DEFAULT_CHAT_MODEL
        self._clients: Dict[str, OpenAI] = {}
        logger.info(f"OpenAIClient initialized. text={self.text_model}, chat={self.chat_model}")

    def _client(self, credential: Credential) -> OpenAI:
        client = self._clients.get(credential)
        if client is None:
            # Retries are handled by the resilience layer
            client = OpenAI(api_key=credential, max_retries=0)
            self._clients[credential] = client
        return client

    async def _call(self, fn, **kwargs) -> Any:
        try:
            # Use asyncio.to_thread as the SDK client is synchronous
            return await asyncio.to_thread(fn, **kwargs)
        except APIStatusError as e:
            logger.warning(f"OpenAI API Error encountered (Status: {e.status_code}): {e.message}")
            raise UpstreamError.from_status(e.status_code, e.message, self.provider_name) from e
        except APIConnectionError as e:
            logger.warning(f"OpenAI connection error: {e}")
            raise UpstreamError.from_status(None, str(e), self.provider_name) from e

    def _require_text(self, text: Optional[str]) -> str:
        if not text:
            raise UpstreamError("Empty response from AI", kind=FailureKind.EMPTY_RESPONSE, provider=self.provider_name)
        return text

    async def generate_text(self, credential: Credential, prompt: str, system_instruction: Optional[str] = None) -> str:
        logger.debug(f"Sending prompt ({len(prompt)} chars) to OpenAI model: {self.text_model}")
        response = await self._call(
            self._client(credential).chat.completions.create,
            model=self.text_model,
            messages=to_chat_messages(system_instruction, [], prompt),
        )
        return self._require_text(completion_text(response))

    async def chat(self, credential: Credential, system_instruction: str, history: List[ChatMessage], message: str) -> str:
        response = await self._call(
            self._client(credential).chat.completions.create,
            model=self.chat_model,
            messages=to_chat_messages(system_instruction, history, message),
        )
        return self._require_text(completion_text(response))

    async def generate_audio(self, credential: Credential, text: str) -> bytes:
        # 'pcm' is raw 24 kHz, 16-bit, mono samples
        response = await self._call(
            self._client(credential).audio.speech.create,
            model=self.audio_model,
            voice=self.VOICE_NAME,
            input=text,
            response_format="pcm",
        )
        audio = response.content
        if not audio:
            raise UpstreamError("Empty audio response from AI", kind=FailureKind.EMPTY_RESPONSE, provider=self.provider_name)
        return audio

    async def generate_image(self, credential: Credential, description: str) -> Optional[bytes]:
        response = await self._call(
            self._client(credential).images.generate,
            model=self.image_model,
            prompt=description,
            size=self.IMAGE_SIZE,
            n=1,
        )
        data = getattr(response, "data", None) or []
        if not data or not getattr(data[0], "b64_json", None):
            logger.info("OpenAI returned no image data.")
            return None
        return base64.b64decode(data[0].b64_json)
