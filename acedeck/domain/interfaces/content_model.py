"""Interface for generative content models.

Defines the contract for generating text, narration audio and images, and
for tutor chat, against different AI providers (e.g., Gemini, OpenAI, Groq).
Every call takes the credential to use, so a resilience layer can rotate
credentials between attempts.
"""

import abc
from typing import List, Optional

from ..models.common import ChatMessage, Credential
from ..models.errors import UnsupportedContentError


class ContentModel(abc.ABC):
    """Abstract Base Class for generative content providers."""

    #: Short provider name used in logs, events and cache keys.
    provider_name: str = "unknown"
    supports_audio: bool = False
    supports_image: bool = False

    @abc.abstractmethod
    async def generate_text(
        self,
        credential: Credential,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> str:
        """Generates text for a single prompt.

        Raises:
            UpstreamError: If the call fails or the response is empty.
        """
        pass

    @abc.abstractmethod
    async def chat(
        self,
        credential: Credential,
        system_instruction: str,
        history: List[ChatMessage],
        message: str,
    ) -> str:
        """Sends `message` after replaying `history` and returns the reply.

        Raises:
            UpstreamError: If the call fails or the reply is empty.
        """
        pass

    async def generate_audio(self, credential: Credential, text: str) -> bytes:
        """Narrates `text`; returns raw 16-bit mono PCM at 24 kHz.

        Raises:
            UnsupportedContentError: If the provider has no speech model.
        """
        raise UnsupportedContentError(f"{self.provider_name} does not support audio generation.")

    async def generate_image(self, credential: Credential, description: str) -> Optional[bytes]:
        """Renders `description`; returns PNG bytes, or None if no image came back.

        Raises:
            UnsupportedContentError: If the provider has no image model.
        """
        raise UnsupportedContentError(f"{self.provider_name} does not support image generation.")
