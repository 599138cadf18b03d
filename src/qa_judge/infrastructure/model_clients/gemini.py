"""
Gemini (Google GenAI SDK) model client
"""

import os
import time

from google import genai
from google.genai.types import GenerateContentConfig, HttpOptions

from qa_judge.domain.exceptions import ConfigError
from qa_judge.domain.value_objects import ModelResponse
from qa_judge.infrastructure.model_clients.base import ModelClient


class GeminiClient(ModelClient):
    """Model client using Google GenAI SDK (Gemini API key or Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 60,
        temperature: float = 0.1,
        max_tokens: int = 2048,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-flash-lite)
            api_key: Gemini API key (falls back to GOOGLE_GENERATIVE_AI_API_KEY)
            project_id: GCP project ID, used for Vertex AI when no API key is available
            location: Vertex AI region (default: global)
            timeout_seconds: Timeout in seconds (default: 60)
            temperature: Sampling temperature (default: 0.1)
            max_tokens: Maximum number of output tokens (default: 2048)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("GOOGLE_GENERATIVE_AI_API_KEY")
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or "global"
        self.timeout_seconds = timeout_seconds

        # Timeout is configured via HttpOptions (milliseconds)
        http_options = HttpOptions(timeout=timeout_seconds * 1000)
        if self.api_key:
            self.client = genai.Client(api_key=self.api_key, http_options=http_options)
        elif self.project_id:
            self.client = genai.Client(
                vertexai=True,
                project=self.project_id,
                location=self.location,
                http_options=http_options,
            )
        else:
            raise ConfigError("GOOGLE_GENERATIVE_AI_API_KEY (or GCP_PROJECT_ID for Vertex AI) is not set")

        # Low temperature for consistent scoring
        self.generation_config = GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

    def generate(self, prompt: str) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt

        Returns:
            ModelResponse: The model's response
        """
        start_time = time.time()
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=self.generation_config,
        )
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if hasattr(response, "usage_metadata") and response.usage_metadata:
            input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
            output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

        return ModelResponse(
            output=(response.text or "").strip(),
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
