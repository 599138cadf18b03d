"""
Model client factory

Creates the appropriate client instance based on the judge model name.
"""

from __future__ import annotations

from qa_judge.harness_config import JudgeConfig, load_judge_config
from qa_judge.infrastructure.model_clients.base import ModelClient
from qa_judge.infrastructure.model_clients.claude import ClaudeClient
from qa_judge.infrastructure.model_clients.gemini import GeminiClient
from qa_judge.infrastructure.model_clients.openai_compat import MODEL_PREFIXES, OpenAICompatibleClient


def create_client(config: JudgeConfig | None = None) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        config: JudgeConfig (loads from env if not provided)

    Returns:
        ModelClient: The appropriate client instance

    Raises:
        ConfigError: If the provider's credentials are missing
    """
    if config is None:
        config = load_judge_config()

    common = dict(
        timeout_seconds=config.timeout_seconds,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )

    if config.model.startswith(MODEL_PREFIXES):
        return OpenAICompatibleClient(config.model, base_url=config.base_url, api_key=config.api_key, **common)
    elif config.model.startswith("claude"):
        return ClaudeClient(config.model, api_key=config.api_key, **common)
    else:
        return GeminiClient(config.model, api_key=config.api_key, **common)
