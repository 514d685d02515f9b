from typing import Optional, Protocol, Sequence


class Prompter(Protocol):
    """Blocking interactive primitives used by the command gate and the setup wizard."""

    def show(self, text: str, style: Optional[str] = None) -> None:
        ...

    def choose(self, question: str, choices: Sequence[str], default: Optional[str] = None) -> str:
        """Asks the user to pick one of `choices` and returns it."""
        ...

    def ask_text(self, question: str, default: str = "", password: bool = False) -> str:
        ...

    def confirm(self, question: str, default: bool = True) -> bool:
        ...
