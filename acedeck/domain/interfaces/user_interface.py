"""Interface for interacting with the user (input/output).

Defines the contract for displaying generated content, status, errors,
warnings, and getting input from the user, allowing different UI
implementations (e.g., console, GUI).
"""

import abc
from typing import Any, List, Sequence

from acedeck.domain.models.catalog import Subject
from acedeck.domain.models.common import ProcessedOutput, PromptText, RotationStatus
from acedeck.utils.notebook import Section


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The processed output string to display.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_notebook(self, sections: List[Section], title: str, **kwargs: Any) -> None:
        """Displays generated notes or questions as titled sections."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "Input: ") -> PromptText:
        """Gets input from the user synchronously.

        Note: For async contexts, the caller should wrap this in asyncio.to_thread.
        """
        pass

    @abc.abstractmethod
    def display_status(self, provider_name: str, status: RotationStatus) -> None:
        """Displays the credential rotation snapshot of a provider."""
        pass

    @abc.abstractmethod
    def display_catalog(self, subjects: Sequence[Subject]) -> None:
        """Displays subjects and, for a single subject, its chapters."""
        pass

    def display_progress(self, message: str) -> None:
        """Displays a transient progress message (e.g., a rotation reason)."""
        pass

    def display_session_header(self, provider_name: str = "AI") -> None:
        """Displays a header for a new tutor session."""
        pass

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        """Displays a footer at the end of a tutor session."""
        pass
