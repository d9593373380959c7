"""Main entry point for the acedeck application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from acedeck.core.command_handler import CommandHandler
from acedeck.core.services.study_service import StudyContentService
from acedeck.core.services.tutor_service import TutorChatService
from acedeck.domain.events.api_events import (
    CredentialBlacklisted, CredentialRotated, DomainEvent, RetryScheduled
)
from acedeck.domain.interfaces.content_model import ContentModel
from acedeck.domain.interfaces.user_interface import UserInterface
from acedeck.infrastructure.ai.gemini.gemini_client import GeminiClient
from acedeck.infrastructure.ai.groq.groq_client import GroqClient
from acedeck.infrastructure.ai.openai.openai_client import OpenAIClient
from acedeck.infrastructure.cache.caching_service import ResponseCache
from acedeck.infrastructure.cli.display import ConsoleDisplay
from acedeck.infrastructure.config.settings import (
    SUPPORTED_PROVIDERS, get_config, get_default_provider, get_model_name, load_configuration
)
from acedeck.infrastructure.filesystem.local_fs import LocalFileSystem
from acedeck.infrastructure.monitoring.logger_setup import setup_logging
from acedeck.infrastructure.optimization.token_estimator import TokenEstimator
from acedeck.infrastructure.resilience.api_retry import RequestResilienceLayer, ResilienceState
from acedeck.infrastructure.resilience.credential_pool import CredentialPool

logger = logging.getLogger(__name__)

MODEL_PURPOSES = ("text", "audio", "image", "chat")


def create_content_model(provider: str) -> ContentModel:
    """Builds the transport for `provider` with any configured model overrides."""
    models = {f"{purpose}_model": get_model_name(provider, purpose) for purpose in MODEL_PURPOSES}
    if provider == "openai":
        return OpenAIClient(**models)
    if provider == "groq":
        return GroqClient(text_model=models["text_model"], chat_model=models["chat_model"])
    return GeminiClient(**models)


def progress_listener(ui: UserInterface) -> Callable[[DomainEvent], None]:
    """Shows rotation reasons while retries are in flight."""
    def _on_event(event: DomainEvent) -> None:
        if isinstance(event, CredentialBlacklisted):
            ui.display_progress(f"{event.reason}, dropping key {event.credential} ({event.remaining_credentials} left)")
        elif isinstance(event, CredentialRotated):
            ui.display_progress(f"{event.reason}, switching key...")
        elif isinstance(event, RetryScheduled):
            ui.display_progress(f"Retrying in {event.delay_seconds:.1f}s...")
    return _on_event


def create_dependencies(provider: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    load_configuration()
    log_level_name = str(get_config('logging.level', 'WARNING')).upper()
    log_level = getattr(logging, log_level_name, logging.WARNING)
    setup_logging(
        log_level=log_level,
        log_format=get_config('logging.format'),
        log_file=get_config('logging.file'),
    )
    logger.info("Initializing application dependencies...")

    provider_name = (provider or get_default_provider()).lower()
    if provider_name not in SUPPORTED_PROVIDERS:
        raise typer.BadParameter(
            f"Unknown provider '{provider_name}'. Choose one of: {', '.join(SUPPORTED_PROVIDERS)}."
        )

    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['file_system'] = LocalFileSystem()
    dependencies['cache'] = ResponseCache(
        directory=get_config('cache.dir'),
        namespace=str(get_config('cache.namespace')),
        quota_bytes=int(get_config('cache.quota_bytes')),
    )
    dependencies['token_estimator'] = TokenEstimator()
    dependencies['content_model'] = create_content_model(provider_name)

    state = ResilienceState.with_random_offset() if get_config('resilience.random_start') else ResilienceState()
    dependencies['resilience'] = RequestResilienceLayer(
        pool=CredentialPool(min_length=int(get_config('resilience.min_key_length')), provider=provider_name),
        state=state,
        provider_name=provider_name,
        overload_delay_s=float(get_config('resilience.overload_delay_seconds')),
        max_attempts=int(get_config('resilience.max_attempts')),
        event_listener=progress_listener(dependencies['ui']),
    )

    dependencies['study_service'] = StudyContentService(
        content_model=dependencies['content_model'],
        resilience=dependencies['resilience'],
        cache=dependencies['cache'],
        token_estimator=dependencies['token_estimator'],
        narration_max_tokens=int(get_config('narration.max_tokens')),
    )
    dependencies['tutor_service'] = TutorChatService(
        study_service=dependencies['study_service'],
        ui=dependencies['ui'],
    )
    dependencies['command_handler'] = CommandHandler(
        study_service=dependencies['study_service'],
        tutor_service=dependencies['tutor_service'],
        file_system=dependencies['file_system'],
        ui=dependencies['ui'],
    )
    logger.info(f"All dependencies initialized successfully (provider: {provider_name}).")
    return dependencies


_dependencies: Optional[Dict[str, Any]] = None
_selected_provider: Optional[str] = None


def get_dependencies() -> Dict[str, Any]:
    """Builds the dependency graph on first use."""
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies(_selected_provider)
    return _dependencies


def get_handler() -> CommandHandler:
    return get_dependencies()['command_handler']


app = typer.Typer(
    name="acedeck",
    help="acedeck: Class 12 study notes, previous year questions, narrated lessons and an AI tutor.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, bool]) -> bool:
    """Manages running async handlers from sync Typer commands."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("Command interrupted by user.")
        return False


def finish(succeeded: bool) -> None:
    if not succeeded:
        raise typer.Exit(code=1)


ExportOption = Annotated[
    Optional[str],
    typer.Option("--export", "-e", help="Also save the generated text to this file.")
]


@app.command()
def subjects(
    subject: Annotated[Optional[str], typer.Argument(help="Subject id or name; lists its chapters.")] = None,
    search: Annotated[Optional[str], typer.Option("--search", "-s", help="Only show chapters whose title contains this text.")] = None,
):
    """List subjects, or the chapters of one subject."""
    finish(get_handler().handle_subjects(subject, search))


@app.command()
def notes(
    subject: Annotated[str, typer.Argument(help="Subject id or name, e.g. 'physics'.")],
    chapter: Annotated[str, typer.Argument(help="Chapter id or title, e.g. 'p1'.")],
    export: ExportOption = None,
):
    """Generate complete study notes for a chapter."""
    finish(run_async(get_handler().handle_notes(subject, chapter, export)))


@app.command()
def questions(
    subject: Annotated[str, typer.Argument(help="Subject id or name.")],
    chapter: Annotated[str, typer.Argument(help="Chapter id or title.")],
    export: ExportOption = None,
):
    """Generate previous year questions with solutions for a chapter."""
    finish(run_async(get_handler().handle_questions(subject, chapter, export)))


@app.command()
def audio(
    subject: Annotated[str, typer.Argument(help="Subject id or name.")],
    chapter: Annotated[str, typer.Argument(help="Chapter id or title.")],
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="WAV file to write.")] = None,
    source: Annotated[str, typer.Option("--source", "-s", help="Narrate 'notes' or 'pyqs'.")] = "notes",
):
    """Record a Hinglish audio lesson for a chapter."""
    if source not in ("notes", "pyqs"):
        raise typer.BadParameter("--source must be 'notes' or 'pyqs'.")
    finish(run_async(get_handler().handle_audio(subject, chapter, output, source)))


@app.command()
def image(
    description: Annotated[str, typer.Argument(help="Formula to render, e.g. 'E = mc^2'.")],
    subject: Annotated[Optional[str], typer.Option("--subject", help="Subject the formula belongs to.")] = None,
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="PNG file to write.")] = None,
):
    """Render a formula as an image."""
    finish(run_async(get_handler().handle_image(description, subject, output)))


@app.command()
def tutor():
    """Chat with AceBot, the AI tutor."""
    finish(run_async(get_handler().handle_tutor()))


@app.command()
def status():
    """Show how many API keys are usable and which one is current."""
    finish(get_handler().handle_status())


@app.command(name="clear-cache")
def clear_cache_command():
    """Delete every cached note and question set."""
    finish(get_handler().handle_clear_cache())


@app.callback()
def main_callback(
    provider: Annotated[
        Optional[str],
        typer.Option("--provider", "-p", help="AI provider to use ('gemini', 'openai', 'groq'). Uses default if not set.")
    ] = None,
):
    """Class 12 study companion backed by generative AI."""
    global _selected_provider
    _selected_provider = provider


def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    logger.info("Starting acedeck application...")
    app()


if __name__ == "__main__":
    cli_entry_point()
