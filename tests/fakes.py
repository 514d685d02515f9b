from typing import List, Optional, Sequence

from core.contracts.models import ExecutionResult


class FakePrompter:
    """Scripted stand-in for the interactive prompter."""

    def __init__(self, choices: Sequence[str] = (), texts: Sequence[str] = (), confirms: Sequence[bool] = ()):
        self.choices = list(choices)
        self.texts = list(texts)
        self.confirms = list(confirms)
        self.shown: List[str] = []
        self.questions: List[str] = []

    def show(self, text: str, style: Optional[str] = None) -> None:
        self.shown.append(text)

    def choose(self, question: str, choices: Sequence[str], default: Optional[str] = None) -> str:
        self.questions.append(question)
        if not self.choices:
            raise AssertionError(f"Unexpected choice prompt: {question}")
        answer = self.choices.pop(0)
        assert answer in choices, f"{answer!r} is not one of {list(choices)}"
        return answer

    def ask_text(self, question: str, default: str = "", password: bool = False) -> str:
        self.questions.append(question)
        if not self.texts:
            raise AssertionError(f"Unexpected text prompt: {question}")
        return self.texts.pop(0)

    def confirm(self, question: str, default: bool = True) -> bool:
        self.questions.append(question)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation prompt: {question}")
        return self.confirms.pop(0)


class RecordingExecutor:
    """Executor that records commands instead of running them."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.commands: List[str] = []

    def __call__(self, command, cwd=None) -> ExecutionResult:
        self.commands.append(command)
        return ExecutionResult(command=command, returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)
