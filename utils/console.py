from typing import Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.text import Text

BANNER = r"""
   ____       _ _
  / ___| __ _(_) |_
 | |  _ / _` | | __|
 | |_| | (_| | | |_
  \____|\__,_|_|\__|
"""

WELCOME_LINES = [
    "👋 Gait is an AI-powered CLI that helps you interact with git repositories using plain old English.",
    "So, instead of memorizing git commands, you can just ask Gait to do it for you.",
    "Or if you get stuck in a sticky situation, just describe what you'd like to do and Gait will help you out.",
]


def display_banner(console: Console) -> None:
    console.print(Text(BANNER, style="bold green"))


def display_welcome_message(console: Console) -> None:
    for line in WELCOME_LINES:
        console.print(line, style="dim green")


class RichPrompter:
    """Interactive prompts on the terminal, backed by rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show(self, text: str, style: Optional[str] = None) -> None:
        self.console.print(text, style=style, markup=False, highlight=False)

    def choose(self, question: str, choices: Sequence[str], default: Optional[str] = None) -> str:
        """Shows a numbered menu and returns the chosen entry."""
        self.console.print(f"[bold]{question}[/bold]")
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]. {choice}", highlight=False)
        extra = {"default": choices.index(default) + 1} if default in choices else {}
        number = IntPrompt.ask(
            "Choose",
            console=self.console,
            choices=[str(i) for i in range(1, len(choices) + 1)],
            show_choices=False,
            **extra,
        )
        return choices[number - 1]

    def ask_text(self, question: str, default: str = "", password: bool = False) -> str:
        return Prompt.ask(question, console=self.console, default=default, password=password, show_default=bool(default))

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, console=self.console, default=default)
