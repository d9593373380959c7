"""Core service for generating study content.

Hides the cache lookup, prompt construction and resilient upstream call
behind one method per kind of content (notes, questions, narration,
formula images, tutor replies).
Bounded Context: Study Content Generation
"""

import logging
from typing import List, Optional

from acedeck.domain.interfaces.cache import ResponseStore
from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.domain.models.common import ChapterTitle, ChatMessage, ContentKind, RotationStatus, SubjectName
from acedeck.domain.models.errors import UnsupportedContentError
from acedeck.infrastructure.ai.prompts import (
    TUTOR_SYSTEM_INSTRUCTION, formula_image_prompt, narration_prompt,
    notes_prompt, questions_prompt
)
from acedeck.infrastructure.optimization.token_estimator import TokenEstimator
from acedeck.infrastructure.resilience.api_retry import RequestResilienceLayer
from acedeck.utils.audio import pcm_to_wav

logger = logging.getLogger(__name__)

DEFAULT_NARRATION_MAX_TOKENS = 600


class StudyContentService:
    """Generates notes, questions, narration and images for a chapter."""

    def __init__(
        self,
        content_model: ContentModel,
        resilience: RequestResilienceLayer,
        cache: ResponseStore,
        token_estimator: TokenEstimator,
        narration_max_tokens: int = DEFAULT_NARRATION_MAX_TOKENS,
    ):
        self.content_model = content_model
        self.resilience = resilience
        self.cache = cache
        self.token_estimator = token_estimator
        self.narration_max_tokens = narration_max_tokens
        logger.info(f"StudyContentService initialized with provider: {content_model.provider_name}")

    def ensure_audio_supported(self) -> None:
        """Raises UnsupportedContentError if the provider cannot narrate."""
        if not self.content_model.supports_audio:
            raise UnsupportedContentError(f"Provider '{self.provider_name}' cannot generate audio.")

    @property
    def provider_name(self) -> str:
        return self.content_model.provider_name

    async def _cached_text(self, kind: ContentKind, subject: SubjectName, chapter: ChapterTitle, prompt: str) -> str:
        key = self.cache.fingerprint(kind.value, subject, chapter)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Serving {kind.value} for '{subject} / {chapter}' from cache.")
            return cached

        text = await self.resilience.execute(
            lambda credential: self.content_model.generate_text(credential, prompt)
        )
        self.cache.set(key, text)
        return text

    async def generate_notes(self, subject: SubjectName, chapter: ChapterTitle) -> str:
        """Returns complete chapter notes, from cache when available."""
        return await self._cached_text(ContentKind.NOTES, subject, chapter, notes_prompt(subject, chapter))

    async def generate_questions(self, subject: SubjectName, chapter: ChapterTitle) -> str:
        """Returns previous-year style questions, from cache when available."""
        return await self._cached_text(ContentKind.PYQS, subject, chapter, questions_prompt(subject, chapter))

    async def generate_audio(self, source_text: str, subject: SubjectName) -> bytes:
        """Narrates `source_text` as a friendly Hinglish lesson.

        Args:
            source_text: Notes or questions to narrate; trimmed to the narration token budget.
            subject: Subject name used in the narration prompt.

        Returns:
            WAV bytes (24 kHz, mono, 16-bit).

        Raises:
            UnsupportedContentError: If the provider cannot produce audio.
        """
        self.ensure_audio_supported()
        excerpt = self.token_estimator.truncate(source_text, self.narration_max_tokens)
        prompt = narration_prompt(subject, excerpt)
        pcm = await self.resilience.execute(
            lambda credential: self.content_model.generate_audio(credential, prompt)
        )
        return pcm_to_wav(pcm)

    async def generate_image(self, description: str, subject: Optional[SubjectName] = None) -> Optional[bytes]:
        """Renders a formula image; returns PNG bytes or None when nothing came back."""
        if not self.content_model.supports_image:
            raise UnsupportedContentError(f"Provider '{self.provider_name}' cannot generate images.")
        if subject:
            logger.debug(f"Generating formula image for subject '{subject}'.")
        prompt = formula_image_prompt(description)
        return await self.resilience.execute(
            lambda credential: self.content_model.generate_image(credential, prompt)
        )

    async def ask_tutor(self, history: List[ChatMessage], message: str) -> str:
        turns = list(history)
        return await self.resilience.execute(
            lambda credential: self.content_model.chat(credential, TUTOR_SYSTEM_INSTRUCTION, turns, message)
        )

    def status(self) -> RotationStatus:
        return self.resilience.status()

    def clear_cache(self) -> int:
        return self.cache.clear()
