"""Core service for interactive tutor chat sessions.

Runs the prompt loop, keeps the session history and hands every turn to
the study service. A failed turn is reported and the session continues.
"""

import asyncio
import logging
import time
from typing import List

from acedeck.core.services.study_service import StudyContentService
from acedeck.domain.interfaces.user_interface import UserInterface
from acedeck.domain.models.common import ChatMessage, MessageRole, ProcessedOutput
from acedeck.domain.models.errors import AceDeckError

logger = logging.getLogger(__name__)

GREETING = "Hello! I am AceBot, your CBSE Class 12 AI Tutor. Need help with a derivation or a tricky concept?"
EXIT_COMMANDS = ("exit", "quit")


class TutorChatService:
    """Orchestrates the interactive tutor chat."""

    def __init__(self, study_service: StudyContentService, ui: UserInterface):
        self.study_service = study_service
        self.ui = ui
        self.history: List[ChatMessage] = []

    async def start_chat_loop(self) -> None:
        """Runs the main asynchronous loop for a tutor session."""
        self.history = []
        started = time.time()
        exchanged = 0

        self.ui.display_session_header(self.study_service.provider_name)
        self.ui.display_output(ProcessedOutput(GREETING), title="AceBot")
        logger.info("Tutor session started.")

        while True:
            try:
                # Run sync input in a thread
                user_input = (await asyncio.to_thread(self.ui.get_prompt, "You: ")).strip()
            except (EOFError, KeyboardInterrupt):
                logger.info("Tutor session interrupted by user.")
                self.ui.display_info("Ending tutor session.")
                break

            if not user_input:
                continue
            if user_input.lower() in EXIT_COMMANDS:
                logger.debug(f"Handling exit command: {user_input}")
                self.ui.display_info("Ending tutor session.")
                break

            try:
                reply = await self.study_service.ask_tutor(list(self.history), user_input)
            except AceDeckError as e:
                logger.error(f"Tutor turn failed: {e}")
                self.ui.display_error(f"Error connecting: {e}. Try again.")
                continue

            self.history.append(ChatMessage(role=MessageRole("user"), content=user_input))
            self.history.append(ChatMessage(role=MessageRole("model"), content=reply))
            exchanged += 2
            self.ui.display_output(ProcessedOutput(reply), title="AceBot")

        self.ui.display_session_footer(exchanged, time.time() - started)
        logger.info(f"Tutor session finished after {exchanged} messages.")
