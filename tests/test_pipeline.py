import asyncio
import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from config.models import Config, ModelConfig
from config.state import UserStateStore
from core.contracts.models import RepositoryContext
from core.gate import ApprovalChoice
from core.llm.providers.dummy_provider import DummyProvider
from core.pipeline import GitAssistant
from core.policy import ConfirmationPolicyStore
from tests.fakes import FakePrompter, RecordingExecutor
from utils.errors import NotARepositoryError, ProviderError


class ScriptedProvider:
    """Returns one scripted reply per call and keeps the prompts it saw."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.replies.pop(0)


def reply(**fields):
    return json.dumps(fields)


@patch("core.pipeline.is_git_repository", return_value=True)
class TestGitAssistant(unittest.TestCase):
    def setUp(self):
        self.config = Config(model=ModelConfig(provider="dummy"))
        self.collector = MagicMock()
        self.collector.collect.return_value = RepositoryContext(current_branch="main", diff="No commits yet.")
        self.policy = ConfirmationPolicyStore(MagicMock(spec=UserStateStore))
        self.policy.requires_confirmation = MagicMock(return_value=True)

    def make_assistant(self, provider, prompter, executor=None):
        assistant = GitAssistant(
            config=self.config,
            model_config=self.config.model,
            policy=self.policy,
            prompter=prompter,
            working_directory="/repo",
            provider=provider,
            collector=self.collector,
        )
        assistant.gate.executor = executor or RecordingExecutor()
        return assistant

    def test_round_sends_context_and_request(self, mock_is_repo):
        provider = DummyProvider(self.config.model, response=reply(
            isRunnable=False, message="You are on main.", explanation="",
        ))
        prompter = FakePrompter(texts=[""])

        asyncio.run(self.make_assistant(provider, prompter).run("which branch am I on?"))

        self.assertEqual(len(provider.prompts), 1)
        self.assertIn("### Current branch\nmain", provider.prompts[0])
        self.assertIn("which branch am I on?", provider.prompts[0])
        self.assertIn("You are on main.", prompter.shown)
        self.collector.collect.assert_called_once()

    def test_follow_up_starts_a_new_round(self, mock_is_repo):
        provider = ScriptedProvider(
            reply(isRunnable=False, message="Which branch?", explanation="Several exist."),
            reply(isRunnable=True, message="delete local branch foo", explanation="", command="git branch -d foo"),
        )
        prompter = FakePrompter(texts=["foo"], choices=[ApprovalChoice.SKIP.value])

        asyncio.run(self.make_assistant(provider, prompter).run("delete that branch"))

        self.assertEqual(len(provider.prompts), 2)
        self.assertTrue(provider.prompts[1].rstrip().endswith("foo"))
        self.assertEqual(self.collector.collect.call_count, 2)

    def test_ask_something_else_starts_a_new_round(self, mock_is_repo):
        provider = ScriptedProvider(
            reply(isRunnable=True, message="push main", explanation="", command="git push"),
            reply(isRunnable=False, message="Done.", explanation=""),
        )
        prompter = FakePrompter(choices=[ApprovalChoice.ASK.value], texts=["show the log instead", ""])

        asyncio.run(self.make_assistant(provider, prompter).run("push"))

        self.assertEqual(len(provider.prompts), 2)
        self.assertIn("show the log instead", provider.prompts[1])

    def test_provider_failure_degrades_to_message(self, mock_is_repo):
        provider = MagicMock()
        provider.generate = AsyncMock(side_effect=ProviderError("OpenAI API error (503): overloaded"))
        prompter = FakePrompter()

        asyncio.run(self.make_assistant(provider, prompter).run("status"))

        self.assertIn("Could not get a suggestion: OpenAI API error (503): overloaded", prompter.shown)

    def test_malformed_response_degrades_to_message(self, mock_is_repo):
        provider = DummyProvider(self.config.model, response="{}")
        prompter = FakePrompter()

        asyncio.run(self.make_assistant(provider, prompter).run("status"))

        self.assertTrue(any(line.startswith("Could not get a suggestion") for line in prompter.shown))

    def test_missing_provider_degrades_to_message(self, mock_is_repo):
        prompter = FakePrompter()
        assistant = self.make_assistant(None, prompter)
        assistant.model_config = ModelConfig(provider="nonexistent")

        asyncio.run(assistant.run("status"))

        self.assertTrue(any("Unknown provider 'nonexistent'" in line for line in prompter.shown))

    def test_not_a_repository(self, mock_is_repo):
        mock_is_repo.return_value = False
        provider = ScriptedProvider()

        with self.assertRaises(NotARepositoryError):
            asyncio.run(self.make_assistant(provider, FakePrompter()).run("status"))

        self.assertEqual(provider.prompts, [])
        self.collector.collect.assert_not_called()


if __name__ == "__main__":
    unittest.main()
