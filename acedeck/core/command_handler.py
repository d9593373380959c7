"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), resolves subjects
and chapters against the catalog and delegates the work to the study and
tutor services. Every handler reports failures through the UI and returns
False so the entry point can exit with a non-zero status.
"""

import dataclasses
import logging
import re
from typing import Optional

from acedeck.core.services.study_service import StudyContentService
from acedeck.core.services.tutor_service import TutorChatService
from acedeck.domain.interfaces.file_system import FileSystem
from acedeck.domain.interfaces.user_interface import UserInterface
from acedeck.domain.models import catalog
from acedeck.domain.models.common import ContentKind, FilePath, SubjectName
from acedeck.domain.models.errors import (
    ExhaustedRetriesError, NoCredentialsAvailableError, UnsupportedContentError
)
from acedeck.utils.notebook import split_sections

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PATH = "formula.png"


def default_artifact_name(*parts: str, suffix: str) -> str:
    """Builds a file name like 'physics_electric_charges_and_fields.wav'."""
    stem = "_".join(re.sub(r"[^a-z0-9]+", "_", p.lower()).strip("_") for p in parts if p)
    return f"{stem or 'acedeck'}{suffix}"


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        study_service: StudyContentService,
        tutor_service: TutorChatService,
        file_system: FileSystem,
        ui: UserInterface,
    ):
        self.study_service = study_service
        self.tutor_service = tutor_service
        self.file_system = file_system
        self.ui = ui

    def _report_failure(self, error: Exception) -> None:
        """Shows a failure with a 'try again' hint."""
        provider = self.study_service.provider_name
        if isinstance(error, NoCredentialsAvailableError):
            self.ui.display_error(
                f"No usable API key for '{provider}'. Set {provider.upper()}_API_KEYS "
                "(comma separated) and try again."
            )
        elif isinstance(error, ExhaustedRetriesError):
            self.ui.display_error(
                f"Gave up after {error.attempts} attempts. Last error: {error.last_error}. "
                "Please try again in a moment."
            )
        elif isinstance(error, UnsupportedContentError):
            self.ui.display_error(f"{error} Choose another provider with --provider.")
        else:
            self.ui.display_error(f"Command failed: {error}")

    def handle_subjects(self, subject_query: Optional[str] = None, search: Optional[str] = None) -> bool:
        """Lists all subjects, or the chapters of one subject.

        With `search`, only chapters whose title contains the text are shown.
        """
        if not subject_query:
            if search:
                self.ui.display_error("Searching chapters needs a subject.")
                return False
            self.ui.display_catalog(catalog.SUBJECTS)
            return True
        subject = catalog.find_subject(subject_query)
        if subject is None:
            self.ui.display_error(f"Unknown subject '{subject_query}'.")
            return False
        if search:
            matches = catalog.search_chapters(subject, search)
            if not matches:
                self.ui.display_info(f"No chapters of {subject.name} match '{search}'.")
                return True
            subject = dataclasses.replace(subject, chapters=tuple(matches))
        self.ui.display_catalog([subject])
        return True

    async def _handle_text(self, kind: ContentKind, subject_query: str, chapter_query: str, export: Optional[str]) -> bool:
        subject, chapter = catalog.resolve(subject_query, chapter_query)
        logger.info(f"Handling '{kind.value}' command for {subject} / {chapter}")
        try:
            if kind is ContentKind.NOTES:
                content = await self.study_service.generate_notes(subject, chapter)
            else:
                content = await self.study_service.generate_questions(subject, chapter)
            label = "Notes" if kind is ContentKind.NOTES else "Previous Year Questions"
            self.ui.display_notebook(split_sections(content), title=f"{subject}: {chapter} ({label})")
            if export:
                await self.file_system.write_text(FilePath(export), content)
                self.ui.display_info(f"Saved to {export}")
            return True
        except (NoCredentialsAvailableError, ExhaustedRetriesError, OSError) as e:
            logger.error(f"'{kind.value}' command failed: {e}")
            self._report_failure(e)
            return False

    async def handle_notes(self, subject: str, chapter: str, export: Optional[str] = None) -> bool:
        return await self._handle_text(ContentKind.NOTES, subject, chapter, export)

    async def handle_questions(self, subject: str, chapter: str, export: Optional[str] = None) -> bool:
        return await self._handle_text(ContentKind.PYQS, subject, chapter, export)

    async def handle_audio(
        self, subject_query: str, chapter_query: str, output: Optional[str] = None, source: str = ContentKind.NOTES.value
    ) -> bool:
        """Narrates the notes (or questions) of a chapter into a WAV file."""
        subject, chapter = catalog.resolve(subject_query, chapter_query)
        path = output or default_artifact_name(subject, chapter, suffix=".wav")
        try:
            # Fail before fetching source text if the provider cannot narrate
            self.study_service.ensure_audio_supported()
            if source == ContentKind.PYQS.value:
                text = await self.study_service.generate_questions(subject, chapter)
            else:
                text = await self.study_service.generate_notes(subject, chapter)
            self.ui.display_progress("Recording lesson...")
            audio = await self.study_service.generate_audio(text, subject)
            await self.file_system.write_bytes(FilePath(path), audio)
        except (NoCredentialsAvailableError, ExhaustedRetriesError, UnsupportedContentError, OSError) as e:
            logger.error(f"Audio command failed: {e}")
            self._report_failure(e)
            return False
        self.ui.display_info(f"Lesson audio saved to {path}")
        return True

    async def handle_image(self, description: str, subject: Optional[str] = None, output: Optional[str] = None) -> bool:
        """Renders a formula image into a PNG file."""
        path = output or DEFAULT_IMAGE_PATH
        subject_name = None
        if subject:
            known = catalog.find_subject(subject)
            subject_name = SubjectName(known.name if known else subject)
        try:
            image = await self.study_service.generate_image(description, subject_name)
            if image is None:
                self.ui.display_warning("The model returned no image. Try rephrasing the formula.")
                return False
            await self.file_system.write_bytes(FilePath(path), image)
        except (NoCredentialsAvailableError, ExhaustedRetriesError, UnsupportedContentError, OSError) as e:
            logger.error(f"Image command failed: {e}")
            self._report_failure(e)
            return False
        self.ui.display_info(f"Formula image saved to {path}")
        return True

    async def handle_tutor(self) -> bool:
        logger.info("Starting interactive tutor session.")
        await self.tutor_service.start_chat_loop()
        return True

    def handle_status(self) -> bool:
        self.ui.display_status(self.study_service.provider_name, self.study_service.status())
        return True

    def handle_clear_cache(self) -> bool:
        removed = self.study_service.clear_cache()
        self.ui.display_info(f"Cleared {removed} cached entries.")
        return True
