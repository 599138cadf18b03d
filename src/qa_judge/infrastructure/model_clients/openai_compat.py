"""
OpenAI-compatible API model client (OpenAI, LMStudio, vLLM, ...)
"""

import os
import time

from openai import OpenAI

from qa_judge.domain.value_objects import ModelResponse
from qa_judge.infrastructure.model_clients.base import ModelClient

# Prefixes routed to this client; stripped before calling the API
MODEL_PREFIXES = ("openai/", "lmstudio/")


class OpenAICompatibleClient(ModelClient):
    """Client using an OpenAI-compatible chat completions API"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: int = 60,
        temperature: float = 0.1,
        max_tokens: int = 2048,
    ):
        """
        Args:
            model_name: Model name (e.g. lmstudio/qwen2.5-7b, openai/gpt-4o-mini)
            base_url: API endpoint (falls back to OPENAI_BASE_URL, then the local LMStudio URL)
            api_key: API key (falls back to OPENAI_API_KEY; usually not required for LMStudio)
            timeout_seconds: Request timeout in seconds (default: 60)
            temperature: Sampling temperature (default: 0.1)
            max_tokens: Maximum number of tokens (default: 2048)
        """
        self.model_name = model_name
        self.api_model_name = model_name
        for prefix in MODEL_PREFIXES:
            self.api_model_name = self.api_model_name.removeprefix(prefix)
        self.temperature = temperature
        self.max_tokens = max_tokens

        # Configuration priority: argument > environment variable > default value
        if model_name.startswith("openai/"):
            base_url = base_url or os.environ.get("OPENAI_BASE_URL")
        else:
            base_url = base_url or os.environ.get("LMSTUDIO_BASE_URL", "http://localhost:1234/v1")
        api_key = api_key or os.environ.get("OPENAI_API_KEY", "lm-studio")

        self.base_url = base_url
        self.client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout_seconds, max_retries=0)

    def generate(self, prompt: str) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt

        Returns:
            ModelResponse: The model's response
        """
        start_time = time.time()
        response = self.client.chat.completions.create(
            model=self.api_model_name,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)
        output = (response.choices[0].message.content or "").strip()

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if response.usage:
            input_tokens = response.usage.prompt_tokens or 0
            output_tokens = response.usage.completion_tokens or 0

        return ModelResponse(
            output=output,
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
