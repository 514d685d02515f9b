import asyncio
import os
import sys
from pathlib import Path
from typing import Tuple

import click
from rich.console import Console

from config.credentials import Credentials, load_credentials, save_credentials
from config.logic import load_and_merge_configs, resolve_model_config
from config.models import Config
from config.state import UserStateStore
from core.contracts.prompter import Prompter
from core.pipeline import GitAssistant
from core.policy import ConfirmationPolicyStore
from utils.console import RichPrompter, display_banner, display_welcome_message
from utils.errors import ConfigError, GaitException
from utils.logger import logger, setup_logger

LOG_LEVEL_ENV_VAR = "GAIT_LOG_LEVEL"
MODEL_CHOICES = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
API_KEY_URL = "https://platform.openai.com/account/api-keys"


class GaitGroup(click.Group):
    """
    Sends any words that are not a known subcommand to `ask`, so
    `gait undo my last commit` works without naming the command.
    A lone `help` shows the banner and the help text.
    """

    def parse_args(self, ctx, args):
        if args == ["help"]:
            args = []
        elif args and args[0] not in self.commands and args[0] not in ("--help", "--version"):
            args = ["ask", *args]
        return super().parse_args(ctx, args)


def load_settings() -> Tuple[Config, UserStateStore]:
    """Loads the layered settings and configures logging from them."""
    config = load_and_merge_configs()
    setup_logger(
        log_level=os.getenv(LOG_LEVEL_ENV_VAR, config.logging.level).upper(),
        log_file=config.logging.file,
    )
    return config, UserStateStore(config.paths.state_file)


def setup_wizard(prompter: Prompter, config: Config, state: UserStateStore) -> Path:
    """
    Asks for the API key and model and stores them.

    Returns:
        The path of the credentials file that was written.
    """
    credentials = load_credentials(config.paths.credentials_file)

    api_key = ""
    if credentials.api_key:
        question = f"We found an existing OpenAI API key: {credentials.masked_api_key()}. Do you want to use it?"
        if prompter.confirm(question, default=True):
            api_key = credentials.api_key
    if not api_key:
        prompter.show(f"To get started, we need your OpenAI API key. You can get one here: {API_KEY_URL}", style="green")
        api_key = prompter.ask_text("🔒 Enter your OpenAI API key (stored locally only)", password=True).strip()
    if not api_key:
        raise ConfigError("An OpenAI API key is required to use gait.")

    current_model = state.get_selected_model() or credentials.selected_model or config.model.name
    model = prompter.choose(
        "Select a model (make sure your account has access):",
        MODEL_CHOICES,
        default=current_model if current_model in MODEL_CHOICES else None,
    )

    path = save_credentials(config.paths.credentials_file, Credentials(api_key=api_key, selected_model=model))
    state.set_selected_model(model)
    return path


def _fail(console: Console, e: Exception) -> None:
    if isinstance(e, GaitException):
        logger.error(f"Known error: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
    else:
        logger.opt(exception=e).error(f"Unexpected error: {e}")
        console.print(f"[bold red]Unexpected error:[/bold red] {e}")
    sys.exit(1)


@click.group(cls=GaitGroup, invoke_without_command=True)
@click.version_option("1.0.0", prog_name="gait")
@click.pass_context
def cli(ctx):
    """
    AI-powered git CLI.

    Describe what you want to do and gait suggests (and runs) the git command:

        gait undo my last commit but keep the changes
    """
    if ctx.invoked_subcommand is None:
        console = Console()
        display_banner(console)
        display_welcome_message(console)
        click.echo(ctx.get_help())


@cli.command("setup")
def setup():
    """Run the setup wizard."""
    console = Console()
    display_banner(console)
    display_welcome_message(console)
    try:
        config, state = load_settings()
        path = setup_wizard(RichPrompter(console), config, state)
    except KeyboardInterrupt:
        console.print("\n[yellow]Setup cancelled.[/yellow]")
        sys.exit(130)
    except Exception as e:
        _fail(console, e)

    console.print(f"[green]👍 Configuration stored in '{path}'[/green]")
    console.print(
        "[dim green]Keep in mind that this is stored as plain text. "
        "You can update your settings anytime by running `gait setup` again.[/dim green]"
    )


@cli.command(
    "ask",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("words", nargs=-1, required=True, type=click.UNPROCESSED)
def ask(words: Tuple[str, ...]):
    """Describe what you want to do in plain English."""
    console = Console()
    request = " ".join(words)
    try:
        config, state = load_settings()
        credentials = load_credentials(config.paths.credentials_file)
        model_config = resolve_model_config(config, state.get_selected_model(), credentials)
        policy = ConfirmationPolicyStore(state, key_mode=config.policy.key)
        assistant = GitAssistant(config, model_config, policy, RichPrompter(console))
        asyncio.run(assistant.run(request))
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted.[/yellow]")
        sys.exit(130)
    except Exception as e:
        _fail(console, e)


if __name__ == "__main__":
    cli()
