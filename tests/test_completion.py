import json

import pytest

from config.models import ModelConfig
from core.contracts.models import CommandDecision
from core.llm.completion import parse_decision, request_decision
from core.llm.providers.dummy_provider import DummyProvider
from utils.errors import DecisionParseError, ProviderError


def test_parse_runnable_decision():
    decision = parse_decision(json.dumps({
        "isRunnable": True,
        "message": "create branch feature/login",
        "explanation": "Creates and switches to the branch.",
        "command": "git switch -c feature/login",
    }))

    assert decision == CommandDecision(
        is_runnable=True,
        message="create branch feature/login",
        explanation="Creates and switches to the branch.",
        command="git switch -c feature/login",
    )


def test_parse_strips_code_fence():
    raw = '```json\n{"isRunnable": false, "message": "Which remote?", "explanation": "Two remotes exist."}\n```'

    decision = parse_decision(raw)

    assert not decision.is_runnable
    assert decision.command is None


@pytest.mark.parametrize("raw", [
    "not json at all",
    "[1, 2, 3]",
    '{"message": "missing isRunnable", "explanation": ""}',
    '{"isRunnable": true, "message": "no command", "explanation": ""}',
    '{"isRunnable": true, "message": "blank command", "explanation": "", "command": "  "}',
])
def test_parse_rejects_malformed_responses(raw):
    with pytest.raises(DecisionParseError):
        parse_decision(raw)


@pytest.mark.asyncio
async def test_request_decision_success():
    provider = DummyProvider(ModelConfig(provider="dummy"))

    result = await request_decision(provider, "show me what changed")

    assert result.ok
    assert result.decision.command == "git status"
    assert provider.prompts == ["show me what changed"]


@pytest.mark.asyncio
async def test_request_decision_malformed_body_is_a_failure():
    provider = DummyProvider(ModelConfig(provider="dummy"), response="Sure! Run git status.")

    result = await request_decision(provider, "status")

    assert not result.ok
    assert "not valid JSON" in result.error


@pytest.mark.asyncio
async def test_request_decision_provider_error_is_a_failure(mocker):
    provider = mocker.MagicMock()
    provider.generate = mocker.AsyncMock(side_effect=ProviderError("OpenAI API error (500): boom"))

    result = await request_decision(provider, "status")

    assert not result.ok
    assert result.error == "OpenAI API error (500): boom"
