from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import BaseModel

from core.contracts.models import CommandDecision, ExecutionResult
from core.contracts.prompter import Prompter
from core.policy import ConfirmationPolicyStore, PolicyChoice
from utils.errors import ConfigError
from utils.logger import logger
from utils.shell import execute_command

Executor = Callable[[str, Optional[Union[str, Path]]], ExecutionResult]


class GateState(str, Enum):
    AWAITING_MODEL_DECISION = "awaiting_model_decision"
    NOT_RUNNABLE = "not_runnable"
    AWAITING_USER_APPROVAL = "awaiting_user_approval"
    EXECUTED = "executed"
    SKIPPED = "skipped"
    POLICY_UPDATE_PROMPT = "policy_update_prompt"
    IDLE = "idle"


class ApprovalChoice(str, Enum):
    RUN = "Run"
    SKIP = "Skip"
    ASK = "Ask something else"


class GateOutcome(BaseModel):
    """What happened to one decision, including the states it went through."""

    states: List[GateState] = []
    execution: Optional[ExecutionResult] = None
    auto_run: bool = False
    policy_choice: Optional[PolicyChoice] = None
    follow_up: Optional[str] = None

    @property
    def executed(self) -> bool:
        return self.execution is not None


class CommandGate:
    """
    Decides whether a suggested command runs, asking the user when the
    confirmation policy requires it, and records the user's policy choice
    after an approved run.
    """

    def __init__(
        self,
        policy: ConfirmationPolicyStore,
        prompter: Prompter,
        executor: Executor = execute_command,
        cwd: Optional[Union[str, Path]] = None,
    ):
        self.policy = policy
        self.prompter = prompter
        self.executor = executor
        self.cwd = cwd

    def handle(self, decision: CommandDecision) -> GateOutcome:
        outcome = GateOutcome()
        self._enter(outcome, GateState.AWAITING_MODEL_DECISION)

        if not decision.is_runnable:
            self._enter(outcome, GateState.NOT_RUNNABLE)
            self.prompter.show(decision.message, style="yellow")
            if decision.explanation:
                self.prompter.show(decision.explanation, style="dim")
            outcome.follow_up = self._ask_follow_up("Your answer (leave empty to stop)")
            return self._enter(outcome, GateState.IDLE)

        key = self.policy.key_for(decision)
        if not self._requires_confirmation(key):
            self.prompter.show(f"Running without confirmation: {decision.command}", style="cyan")
            outcome.auto_run = True
            outcome.execution = self._execute(decision.command)
            self._enter(outcome, GateState.EXECUTED)
            return self._enter(outcome, GateState.IDLE)

        self._enter(outcome, GateState.AWAITING_USER_APPROVAL)
        self.prompter.show(decision.message, style="bold")
        self.prompter.show(f"$ {decision.command}", style="cyan")
        if decision.explanation:
            self.prompter.show(decision.explanation, style="dim")

        choice = ApprovalChoice(
            self.prompter.choose("What would you like to do?", [c.value for c in ApprovalChoice], default=ApprovalChoice.RUN.value)
        )
        if choice is ApprovalChoice.SKIP:
            self._enter(outcome, GateState.SKIPPED)
            return self._enter(outcome, GateState.IDLE)
        if choice is ApprovalChoice.ASK:
            self._enter(outcome, GateState.SKIPPED)
            outcome.follow_up = self._ask_follow_up("What else would you like to do? (leave empty to stop)")
            return self._enter(outcome, GateState.IDLE)

        outcome.execution = self._execute(decision.command)
        self._enter(outcome, GateState.EXECUTED)

        self._enter(outcome, GateState.POLICY_UPDATE_PROMPT)
        policy_choice = PolicyChoice(
            self.prompter.choose("How should similar commands be handled next time?", [c.value for c in PolicyChoice])
        )
        try:
            self.policy.apply(policy_choice, key)
            outcome.policy_choice = policy_choice
        except ConfigError as e:
            logger.error(f"Could not save confirmation policy: {e}")
            self.prompter.show(f"Could not save your choice: {e}", style="red")
        return self._enter(outcome, GateState.IDLE)

    def _requires_confirmation(self, key: str) -> bool:
        try:
            return self.policy.requires_confirmation(key)
        except ConfigError as e:
            logger.error(f"Could not read confirmation policy: {e}")
            self.prompter.show(f"Could not read your confirmation settings, asking instead: {e}", style="red")
            return True

    def _execute(self, command: str) -> ExecutionResult:
        result = self.executor(command, self.cwd)
        if result.stdout.strip():
            self.prompter.show(result.stdout.rstrip())
        if result.failed:
            if result.stderr.strip():
                self.prompter.show(result.stderr.rstrip(), style="red")
            if result.returncode != 0:
                self.prompter.show(f"Command exited with code {result.returncode}.", style="bold red")
        return result

    def _ask_follow_up(self, question: str) -> Optional[str]:
        answer = self.prompter.ask_text(question).strip()
        return answer or None

    @staticmethod
    def _enter(outcome: GateOutcome, state: GateState) -> GateOutcome:
        logger.debug(f"Command gate -> {state.value}")
        outcome.states.append(state)
        return outcome
