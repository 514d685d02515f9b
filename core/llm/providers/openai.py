import os
import httpx
import json

from core.contracts.provider import LLMProvider
from config.models import ModelConfig
from core.registry import provider_registry
from utils.errors import ProviderError

DEFAULT_BASE_URL = "https://api.openai.com/v1"


@provider_registry.register("openai")
class OpenAIProvider(LLMProvider):
    """
    A provider for OpenAI's chat completions API, or any compatible endpoint via `base_url`.
    """

    def __init__(self, config: ModelConfig):
        self.config = config
        self._api_key = config.api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise ProviderError("OpenAI API key not found. Run `gait setup` or set the OPENAI_API_KEY environment variable.")

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url or DEFAULT_BASE_URL,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout_sec,
        )

    async def _request(self, payload: dict) -> httpx.Response:
        try:
            async with self._create_client() as client:
                response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to OpenAI timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            try:
                error_details = e.response.json()
                error_message = error_details.get("error", {}).get("message", e.response.text)
            except json.JSONDecodeError:
                error_message = e.response.text
            raise ProviderError(f"OpenAI API error ({e.response.status_code}): {error_message}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProviderError(f"Request to OpenAI failed: {e}") from e

    def _build_payload(self, prompt: str) -> dict:
        return {
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            **self.config.parameters,
        }

    async def generate(self, prompt: str) -> str:
        """
        Sends the prompt and returns the content of the first choice.
        """
        payload = self._build_payload(prompt)
        response = await self._request(payload)
        try:
            data = response.json()
            return data["choices"][0]["message"]["content"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected response from OpenAI: {e}") from e
