import pytest
from pathlib import Path
from typer.testing import CliRunner
from unittest.mock import MagicMock

from acedeck import main
from acedeck.core.command_handler import CommandHandler
from acedeck.core.services.study_service import StudyContentService
from acedeck.core.services.tutor_service import TutorChatService
from acedeck.domain.models.common import RotationStatus
from acedeck.infrastructure.filesystem.local_fs import LocalFileSystem
from acedeck.infrastructure.optimization.token_estimator import TokenEstimator
from acedeck.infrastructure.resilience.api_retry import RequestResilienceLayer
from acedeck.main import app

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# fake_model: FakeContentModel (records every upstream call)
# response_cache: ResponseCache in a temporary directory
# make_pool: builds a CredentialPool from fixed keys
# mock_console_display: MagicMock standing in for ConsoleDisplay

KEY = "keyA-0000000000"


async def no_sleep(_delay):
    return None


@pytest.fixture
def wire_app(monkeypatch, fake_model, response_cache, make_pool, mock_console_display):
    """Replaces the composition root with real services around a fake transport."""
    def _wire(*keys):
        token_estimator = MagicMock(spec=TokenEstimator)
        token_estimator.truncate.side_effect = lambda text, max_tokens: text
        layer = RequestResilienceLayer(make_pool(*keys), provider_name="fake", sleep=no_sleep)
        study = StudyContentService(fake_model, layer, response_cache, token_estimator)
        handler = CommandHandler(
            study_service=study,
            tutor_service=TutorChatService(study, mock_console_display),
            file_system=LocalFileSystem(),
            ui=mock_console_display,
        )
        monkeypatch.setattr(main, "_dependencies", {"command_handler": handler})
        return handler
    return _wire


def test_notes_command_flow(runner: CliRunner, wire_app, fake_model, mock_console_display, tmp_path: Path):
    """Notes are generated once, exported, and served from the cache afterwards."""
    wire_app(KEY)
    export = tmp_path / "notes" / "physics_p1.txt"

    result = runner.invoke(app, ["notes", "physics", "p1", "--export", str(export)])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert export.read_text(encoding="utf-8") == fake_model.text
    sections = mock_console_display.display_notebook.call_args.args[0]
    assert sections[0].title == "Coulomb's Law"
    mock_console_display.display_error.assert_not_called()

    result = runner.invoke(app, ["notes", "physics", "Electric Charges and Fields"])

    assert result.exit_code == 0
    assert len(fake_model.calls) == 1


def test_audio_command_writes_wav(runner: CliRunner, wire_app, fake_model, tmp_path: Path):
    wire_app(KEY)
    output = tmp_path / "lesson.wav"

    result = runner.invoke(app, ["audio", "physics", "p12", "-o", str(output)])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert output.read_bytes()[:4] == b"RIFF"
    assert [call[0] for call in fake_model.calls] == ["text", "audio"]


def test_audio_rejects_unknown_source(runner: CliRunner, wire_app):
    wire_app(KEY)
    result = runner.invoke(app, ["audio", "physics", "p12", "--source", "slides"])
    assert result.exit_code != 0


def test_missing_keys_exit_non_zero(runner: CliRunner, wire_app, fake_model, mock_console_display):
    wire_app()

    result = runner.invoke(app, ["questions", "maths", "m3"])

    assert result.exit_code == 1
    assert fake_model.calls == []
    assert "API_KEYS" in mock_console_display.display_error.call_args.args[0]


def test_status_command(runner: CliRunner, wire_app, mock_console_display):
    wire_app(KEY, "keyB-0000000000")

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    mock_console_display.display_status.assert_called_once_with("fake", RotationStatus(2, 1, None))


def test_subjects_command(runner: CliRunner, wire_app, mock_console_display):
    wire_app(KEY)

    assert runner.invoke(app, ["subjects"]).exit_code == 0
    assert runner.invoke(app, ["subjects", "biology"]).exit_code == 0
    assert runner.invoke(app, ["subjects", "astrology"]).exit_code == 1
    assert mock_console_display.display_catalog.call_count == 2


def test_subjects_search_command(runner: CliRunner, wire_app, mock_console_display):
    wire_app(KEY)

    result = runner.invoke(app, ["subjects", "physics", "--search", "magnetism"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    shown = mock_console_display.display_catalog.call_args.args[0]
    assert [chapter.id for chapter in shown[0].chapters] == ["p4", "p5"]

    result = runner.invoke(app, ["subjects", "--search", "optics"])

    assert result.exit_code == 1
    assert mock_console_display.display_catalog.call_count == 1


def test_clear_cache_command(runner: CliRunner, wire_app, mock_console_display):
    wire_app(KEY)
    runner.invoke(app, ["notes", "physics", "p1"])

    result = runner.invoke(app, ["clear-cache"])

    assert result.exit_code == 0
    mock_console_display.display_info.assert_called_with("Cleared 1 cached entries.")
