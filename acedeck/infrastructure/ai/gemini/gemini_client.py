"""Concrete implementation of the ContentModel interface using the Gemini API.

Hides the specifics of the google-genai library and translates vendor
errors into `UpstreamError` with the HTTP status code preserved.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import errors, types

from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.domain.models.common import ChatMessage, Credential
from acedeck.domain.models.errors import FailureKind, UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient(ContentModel):
    """Gemini implementation of the ContentModel interface."""

    provider_name = "gemini"
    supports_audio = True
    supports_image = True

    DEFAULT_TEXT_MODEL = "gemini-flash-latest"
    DEFAULT_AUDIO_MODEL = "gemini-2.5-flash-preview-tts"
    DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
    DEFAULT_CHAT_MODEL = "gemini-3-flash-preview"
    VOICE_NAME = "Kore"
    IMAGE_ASPECT_RATIO = "4:3"

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
        self._clients: Dict[str, genai.Client] = {}
        logger.info(f"GeminiClient initialized. text={self.text_model}, chat={self.chat_model}")

    def _client(self, credential: Credential) -> genai.Client:
        client = self._clients.get(credential)
        if client is None:
            client = genai.Client(api_key=credential)
            self._clients[credential] = client
        return client

    def _translate_error(self, error: errors.APIError) -> UpstreamError:
        message = getattr(error, "message", None) or str(error)
        code = getattr(error, "code", None)
        logger.warning(f"Gemini API Error encountered (Status: {code if code is not None else 'N/A'}): {message}")
        return UpstreamError.from_status(code, message, self.provider_name)

    async def _generate(self, credential: Credential, model: str, contents: Any, config: Optional[types.GenerateContentConfig]) -> Any:
        client = self._client(credential)
        try:
            # The SDK call is synchronous
            return await asyncio.to_thread(
                client.models.generate_content,
                model=model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise self._translate_error(e) from e

    def _require_text(self, text: Optional[str]) -> str:
        if not text:
            raise UpstreamError("Empty response from AI", kind=FailureKind.EMPTY_RESPONSE, provider=self.provider_name)
        return text

    @staticmethod
    def _inline_bytes(response: Any) -> Optional[bytes]:
        """Returns the first inline payload of a response, base64-decoded if needed."""
        candidates = getattr(response, "candidates", None) or []
        for candidate in candidates:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    data = inline.data
                    return base64.b64decode(data) if isinstance(data, str) else bytes(data)
        return None

    async def generate_text(self, credential: Credential, prompt: str, system_instruction: Optional[str] = None) -> str:
        logger.debug(f"Sending prompt ({len(prompt)} chars) to Gemini model: {self.text_model}")
        config = types.GenerateContentConfig(system_instruction=system_instruction) if system_instruction else None
        response = await self._generate(credential, self.text_model, prompt, config)
        return self._require_text(response.text)

    async def generate_audio(self, credential: Credential, text: str) -> bytes:
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.VOICE_NAME)
                )
            ),
        )
        response = await self._generate(credential, self.audio_model, text, config)
        audio = self._inline_bytes(response)
        if not audio:
            raise UpstreamError("Empty audio response from AI", kind=FailureKind.EMPTY_RESPONSE, provider=self.provider_name)
        return audio

    async def generate_image(self, credential: Credential, description: str) -> Optional[bytes]:
        config = types.GenerateContentConfig(image_config=types.ImageConfig(aspect_ratio=self.IMAGE_ASPECT_RATIO))
        response = await self._generate(credential, self.image_model, description, config)
        image = self._inline_bytes(response)
        if image is None:
            logger.info("Gemini returned no image data.")
        return image

    async def chat(self, credential: Credential, system_instruction: str, history: List[ChatMessage], message: str) -> str:
        client = self._client(credential)
        prior = [
            types.Content(role="model" if turn["role"] == "model" else "user", parts=[types.Part(text=turn["content"])])
            for turn in history
        ]
        try:
            session = client.chats.create(
                model=self.chat_model,
                config=types.GenerateContentConfig(system_instruction=system_instruction),
                history=prior,
            )
            response = await asyncio.to_thread(session.send_message, message)
        except errors.APIError as e:
            raise self._translate_error(e) from e
        return self._require_text(response.text)
