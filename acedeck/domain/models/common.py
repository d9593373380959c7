"""Defines common Value Objects used across different domain contexts.

These objects represent simple values or concepts like credentials, cache
fingerprints, subjects and chapters, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Optional, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
PromptText = NewType("PromptText", str)          # Text sent to the upstream model
ProcessedOutput = NewType("ProcessedOutput", str)  # Text ready for display
FilePath = NewType("FilePath", str)              # Path of a written artifact

# === Credential Context ===
Credential = NewType("Credential", str)          # One API token from the pool

# === Caching Context ===
CacheKey = NewType("CacheKey", str)              # Fingerprint of a logical request

# === Study Content Context ===
SubjectName = NewType("SubjectName", str)        # e.g. 'Physics'
ChapterTitle = NewType("ChapterTitle", str)      # e.g. 'Electric Charges and Fields'

# === Tutor Chat Context ===
MessageRole = NewType("MessageRole", str)        # 'user' or 'model'

# === Token Management ===
TokenCount = NewType("TokenCount", int)          # Number of tokens


class ContentKind(str, Enum):
    """Kinds of cacheable text content."""
    NOTES = "notes"
    PYQS = "pyqs"


class ChatMessage(TypedDict):
    """One turn of tutor conversation history."""
    role: MessageRole
    content: str


@dataclass(frozen=True)
class RotationStatus:
    """Read-only snapshot of a resilience layer, for display only."""
    active_credentials: int
    current_index: int  # 1-based, 0 when no credential is usable
    last_rotation_reason: Optional[str] = None
