"""
Anthropic Claude model client
"""

import os
import time

from anthropic import Anthropic

from qa_judge.domain.exceptions import ConfigError
from qa_judge.domain.value_objects import ModelResponse
from qa_judge.infrastructure.model_clients.base import ModelClient


class ClaudeClient(ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: int = 60,
        temperature: float = 0.1,
        max_tokens: int = 2048,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-haiku-4-5-20251001)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            timeout_seconds: Request timeout in seconds (default: 60)
            temperature: Sampling temperature (default: 0.1)
            max_tokens: Maximum number of output tokens (default: 2048)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.temperature = temperature
        self.max_tokens = max_tokens

        if not self.api_key:
            raise ConfigError("ANTHROPIC_API_KEY is not set")

        # Retries are owned by the judge client
        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds, max_retries=0)

    def generate(self, prompt: str) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt

        Returns:
            ModelResponse: The model's response
        """
        start_time = time.time()
        response = self.client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}]
        )
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)
        output = response.content[0].text.strip() if response.content else ""

        # Retrieve token usage
        input_tokens = getattr(response.usage, "input_tokens", 0) or 0
        output_tokens = getattr(response.usage, "output_tokens", 0) or 0

        return ModelResponse(
            output=output,
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
