from typing import Protocol


class LLMProvider(Protocol):
    """A protocol for completion service providers."""

    async def generate(self, prompt: str) -> str:
        """
        Sends a prompt to the model and returns its raw text reply.

        Args:
            prompt: The rendered prompt, instructions and context included.

        Returns:
            The model's response body, expected to be a JSON object.
        """
        ...
