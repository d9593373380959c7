"""Service for estimating token counts and trimming text to a token budget.

Uses `tiktoken` to keep narration input within what the speech models
accept, falling back to a character approximation when the encoding
cannot be loaded.
Bounded Context: Token Management
"""

import logging
from typing import Optional

import tiktoken

from acedeck.domain.models.common import TokenCount

logger = logging.getLogger(__name__)

DEFAULT_TOKENIZER_MODEL = "cl100k_base"
APPROX_CHARS_PER_TOKEN = 4  # Fallback approximation


class TokenEstimator:
    """Estimates token counts using tiktoken or approximation."""

    def __init__(self, tokenizer_model_name: Optional[str] = None):
        self.tokenizer_name = tokenizer_model_name or DEFAULT_TOKENIZER_MODEL
        self.tokenizer = None
        try:
            self.tokenizer = tiktoken.get_encoding(self.tokenizer_name)
            logger.info(f"TokenEstimator initialized with tiktoken model: {self.tokenizer_name}")
        except Exception as e:
            logger.warning(f"Failed to load tiktoken model '{self.tokenizer_name}': {e}. Falling back to approximation.")

    def estimate_tokens(self, text: str) -> TokenCount:
        """Estimates the token count for a single string of text."""
        str_text = str(text or "")
        if not str_text:
            return TokenCount(0)
        if self.tokenizer:
            count = len(self.tokenizer.encode(str_text))
            logger.debug(f"Estimated tokens for text (len {len(str_text)}): {count} (using {self.tokenizer_name})")
            return TokenCount(count)
        approx_count = -(-len(str_text) // APPROX_CHARS_PER_TOKEN)
        logger.debug(f"Estimated tokens for text (len {len(str_text)}): {approx_count} (using approximation)")
        return TokenCount(approx_count)

    def truncate(self, text: str, max_tokens: int) -> str:
        """Returns the longest prefix of `text` within `max_tokens` tokens.

        Args:
            text: Text to trim.
            max_tokens: Token budget; values below 1 yield an empty string.

        Returns:
            `text` unchanged if it already fits, otherwise a trimmed prefix.
        """
        str_text = str(text or "")
        if max_tokens < 1:
            return ""
        if self.tokenizer:
            tokens = self.tokenizer.encode(str_text)
            if len(tokens) <= max_tokens:
                return str_text
            trimmed = self.tokenizer.decode(tokens[:max_tokens])
        else:
            limit = max_tokens * APPROX_CHARS_PER_TOKEN
            if len(str_text) <= limit:
                return str_text
            trimmed = str_text[:limit]
        logger.debug(f"Truncated text from {len(str_text)} to {len(trimmed)} characters ({max_tokens} tokens).")
        return trimmed
