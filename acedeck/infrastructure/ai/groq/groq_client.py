"""Concrete implementation of the ContentModel interface using the Groq API.

Groq serves text and chat only; audio and image requests are rejected by
the study service before any call is made.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from groq import APIConnectionError, APIStatusError, Groq as GroqSDKClient

from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.domain.models.common import ChatMessage, Credential
from acedeck.domain.models.errors import FailureKind, UpstreamError
from acedeck.infrastructure.ai.openai.openai_client import completion_text, to_chat_messages

logger = logging.getLogger(__name__)


class GroqClient(ContentModel):
    """Groq implementation of the ContentModel interface."""

    provider_name = "groq"

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(self, text_model: Optional[str] = None, chat_model: Optional[str] = None):
        self.text_model = text_model or self.DEFAULT_MODEL
        self.chat_model = chat_model or self.text_model
        self._clients: Dict[str, GroqSDKClient] = {}
        logger.info(f"GroqClient initialized for model: {self.text_model}")

    def _client(self, credential: Credential) -> GroqSDKClient:
        client = self._clients.get(credential)
        if client is None:
            client = GroqSDKClient(api_key=credential, max_retries=0)
            self._clients[credential] = client
        return client

    async def _complete(self, credential: Credential, model: str, messages: List[Dict[str, str]]) -> str:
        logger.debug(f"Sending {len(messages)} messages to Groq model: {model}")
        try:
            # Use asyncio.to_thread as the official Groq SDK is synchronous
            chat_completion = await asyncio.to_thread(
                self._client(credential).chat.completions.create,
                messages=messages,
                model=model,
            )
        except APIStatusError as e:
            logger.warning(f"Groq API Error encountered (Status: {e.status_code}): {e.message}")
            raise UpstreamError.from_status(e.status_code, e.message, self.provider_name) from e
        except APIConnectionError as e:
            logger.warning(f"Groq connection error: {e}")
            raise UpstreamError.from_status(None, str(e), self.provider_name) from e

        text = completion_text(chat_completion)
        if not text:
            raise UpstreamError("Empty response from AI", kind=FailureKind.EMPTY_RESPONSE, provider=self.provider_name)
        return text

    async def generate_text(self, credential: Credential, prompt: str, system_instruction: Optional[str] = None) -> str:
        return await self._complete(credential, self.text_model, to_chat_messages(system_instruction, [], prompt))

    async def chat(self, credential: Credential, system_instruction: str, history: List[ChatMessage], message: str) -> str:
        return await self._complete(credential, self.chat_model, to_chat_messages(system_instruction, history, message))
