import pytest
from click.testing import CliRunner

import cli as cli_module
from config.models import Config, PathsConfig
from config.state import UserStateStore
from tests.fakes import FakePrompter
from utils.errors import ConfigError, NotARepositoryError


@pytest.fixture
def runner():
    return CliRunner()


def test_bare_invocation_shows_banner_and_help(runner):
    result = runner.invoke(cli_module.cli, [])

    assert result.exit_code == 0
    assert "AI-powered CLI" in result.output
    assert "setup" in result.output


def test_help_word_shows_banner_and_help(runner):
    result = runner.invoke(cli_module.cli, ["help"])

    assert result.exit_code == 0
    assert "Run the setup wizard." in result.output


def test_words_are_joined_into_one_request(runner, mocker):
    mocker.patch.object(cli_module, "load_settings", return_value=(Config(), mocker.MagicMock()))
    mocker.patch.object(cli_module, "load_credentials")
    mocker.patch.object(cli_module, "resolve_model_config")
    assistant_cls = mocker.patch.object(cli_module, "GitAssistant")
    asyncio_run = mocker.patch.object(cli_module.asyncio, "run")

    result = runner.invoke(cli_module.cli, ["undo", "my", "last", "commit", "-f"])

    assert result.exit_code == 0, result.output
    assistant_cls.return_value.run.assert_called_once_with("undo my last commit -f")
    asyncio_run.assert_called_once()


def test_help_followed_by_words_is_a_request(runner, mocker):
    mocker.patch.object(cli_module, "load_settings", return_value=(Config(), mocker.MagicMock()))
    mocker.patch.object(cli_module, "load_credentials")
    mocker.patch.object(cli_module, "resolve_model_config")
    assistant_cls = mocker.patch.object(cli_module, "GitAssistant")
    mocker.patch.object(cli_module.asyncio, "run")

    runner.invoke(cli_module.cli, ["help", "me", "rebase"])

    assistant_cls.return_value.run.assert_called_once_with("help me rebase")


def test_not_a_repository_is_reported(runner, mocker):
    mocker.patch.object(cli_module, "load_settings", return_value=(Config(), mocker.MagicMock()))
    mocker.patch.object(cli_module, "load_credentials")
    mocker.patch.object(cli_module, "resolve_model_config")
    mocker.patch.object(cli_module, "GitAssistant")
    mocker.patch.object(cli_module.asyncio, "run", side_effect=NotARepositoryError("/tmp is not a Git repository."))

    result = runner.invoke(cli_module.cli, ["status"])

    assert result.exit_code == 1
    assert "/tmp is not a Git repository." in result.output


@pytest.fixture
def setup_config(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = Config(paths=PathsConfig(
        state_file=str(tmp_path / "state.json"),
        credentials_file=str(tmp_path / ".gait.env"),
    ))
    return config, UserStateStore(config.paths.state_file)


def test_setup_wizard_stores_key_and_model(setup_config):
    config, state = setup_config
    prompter = FakePrompter(texts=["sk-new-key-999"], choices=["gpt-4o"])

    path = cli_module.setup_wizard(prompter, config, state)

    assert path.read_text() == "OPENAI_API_KEY=sk-new-key-999\nSELECTED_MODEL=gpt-4o\n"
    assert state.get_selected_model() == "gpt-4o"


def test_setup_wizard_reuses_existing_key(setup_config, tmp_path):
    config, state = setup_config
    (tmp_path / ".gait.env").write_text("OPENAI_API_KEY=sk-old-key-123\n")
    prompter = FakePrompter(confirms=[True], choices=["gpt-4o-mini"])

    cli_module.setup_wizard(prompter, config, state)

    assert "sk-...123" in prompter.questions[0]
    assert "OPENAI_API_KEY=sk-old-key-123" in (tmp_path / ".gait.env").read_text()


def test_setup_wizard_requires_a_key(setup_config):
    config, state = setup_config
    prompter = FakePrompter(texts=[""])

    with pytest.raises(ConfigError, match="API key is required"):
        cli_module.setup_wizard(prompter, config, state)
