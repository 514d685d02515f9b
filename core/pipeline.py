import asyncio
from pathlib import Path
from typing import Optional, Union

from config.models import Config, ModelConfig
from core.collectors.repository import RepositoryContextCollector
from core.contracts.models import DecisionResult, RepositoryContext
from core.contracts.prompter import Prompter
from core.contracts.provider import LLMProvider
from core.gate import CommandGate, GateOutcome
from core.llm.completion import request_decision
from core.llm.router import get_provider
from core.policy import ConfirmationPolicyStore
from core.prompt.builder import PromptBuilder
from utils.errors import NotARepositoryError, ProviderError
from utils.git import is_git_repository
from utils.logger import logger


class GitAssistant:
    """
    The main interaction loop.
    Each round collects the repository context, asks the completion service
    for a decision and hands it to the command gate.
    """

    def __init__(
        self,
        config: Config,
        model_config: ModelConfig,
        policy: ConfirmationPolicyStore,
        prompter: Prompter,
        working_directory: Optional[Union[str, Path]] = None,
        provider: Optional[LLMProvider] = None,
        collector: Optional[RepositoryContextCollector] = None,
        gate: Optional[CommandGate] = None,
    ):
        self.config = config
        self.model_config = model_config
        self.prompter = prompter
        self.working_directory = Path(working_directory) if working_directory is not None else Path.cwd()
        self._provider = provider
        self.collector = collector or RepositoryContextCollector(config.context)
        self.gate = gate or CommandGate(policy, prompter, cwd=self.working_directory)
        self.prompt_builder = PromptBuilder()

    async def run(self, request: str) -> None:
        """
        Processes `request` and every follow-up the user gives until they stop.

        Raises:
            NotARepositoryError: If the working directory is not a Git repository.
        """
        if not is_git_repository(self.working_directory):
            raise NotARepositoryError(
                f"{self.working_directory} is not a Git repository. Run gait inside a repository."
            )

        next_request: Optional[str] = request
        while next_request:
            next_request = await self.ask(next_request)

    async def ask(self, request: str) -> Optional[str]:
        """
        Runs one round for `request`.

        Returns:
            The user's follow-up request, or None when the session should end.
        """
        logger.info(f"Processing request: {request}")
        context = await self._collect_context()

        result = await self._decide(context, request)
        if not result.ok:
            self.prompter.show(f"Could not get a suggestion: {result.error}", style="bold red")
            return None

        outcome: GateOutcome = self.gate.handle(result.decision)
        return outcome.follow_up

    async def _collect_context(self) -> RepositoryContext:
        logger.info("Collecting repository context...")
        context = await asyncio.to_thread(self.collector.collect, self.working_directory)
        logger.debug(f"Collected context: {context.model_dump_json(indent=2)}")
        return context

    async def _decide(self, context: RepositoryContext, request: str) -> DecisionResult:
        try:
            provider = self._get_provider()
        except ProviderError as e:
            logger.error(f"Could not create provider: {e}")
            return DecisionResult.failure(str(e))

        prompt = self.prompt_builder.build(context, request)
        logger.debug(f"Generated prompt for LLM:\n{prompt}")
        logger.info(f"Calling provider '{self.model_config.provider}' with model '{self.model_config.name}'...")
        return await request_decision(provider, prompt)

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_provider(self.model_config)
        return self._provider
