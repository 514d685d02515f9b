import json
import re

from pydantic import ValidationError

from core.contracts.models import CommandDecision, DecisionResult
from core.contracts.provider import LLMProvider
from utils.errors import DecisionParseError, ProviderError
from utils.logger import logger

CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_decision(raw: str) -> CommandDecision:
    """
    Parses the model's reply into a CommandDecision.

    Raises:
        DecisionParseError: If the reply is not a JSON object with the required fields.
    """
    text = raw.strip()
    fenced = CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecisionParseError(f"Model response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DecisionParseError("Model response is not a JSON object.")

    try:
        return CommandDecision.model_validate(data)
    except ValidationError as e:
        raise DecisionParseError(f"Model response is missing required fields: {e}") from e


async def request_decision(provider: LLMProvider, prompt: str) -> DecisionResult:
    """Calls the completion service and turns every failure into a failed result."""
    try:
        raw = await provider.generate(prompt)
        logger.debug(f"Raw model response:\n{raw}")
        return DecisionResult.success(parse_decision(raw))
    except ProviderError as e:
        logger.error(f"Completion request failed: {e}")
        return DecisionResult.failure(str(e))
