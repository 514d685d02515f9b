import json
from typing import Optional

from core.contracts.provider import LLMProvider
from config.models import ModelConfig
from core.registry import provider_registry

DEFAULT_RESPONSE = json.dumps({
    "isRunnable": True,
    "message": "show repository status",
    "explanation": "git status lists staged, unstaged and untracked changes.",
    "command": "git status",
})


@provider_registry.register("dummy")
class DummyProvider(LLMProvider):
    """A provider for tests and offline runs that always answers with the same decision."""

    def __init__(self, config: ModelConfig, response: Optional[str] = None):
        self.config = config
        self._response = response if response is not None else DEFAULT_RESPONSE
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._response
