"""
Health Check

Performs a connectivity check for the judge model before an evaluation run.
"""

from typing import Callable

from qa_judge.domain.entities import HealthCheckResult
from qa_judge.harness_config import JudgeConfig
from qa_judge.infrastructure.model_clients.base import ModelClient


HEALTH_CHECK_PROMPT = "Reply with only 'OK' if you can read this message."


def health_check_judge(
    judge_config: JudgeConfig,
    create_client_fn: Callable[[JudgeConfig], ModelClient],
) -> HealthCheckResult:
    """
    Send a trivial prompt to the judge model.

    Args:
        judge_config: Judge configuration
        create_client_fn: Function to create a model client

    Returns:
        HealthCheckResult: Health check result
    """
    try:
        client = create_client_fn(judge_config)
        response = client.generate(HEALTH_CHECK_PROMPT)
    except Exception as e:
        return HealthCheckResult(
            model_name=judge_config.model,
            success=False,
            latency_ms=None,
            error=str(e),
        )

    if not response.output:
        return HealthCheckResult(
            model_name=judge_config.model,
            success=False,
            latency_ms=response.latency_ms,
            error="empty response",
        )
    return HealthCheckResult(
        model_name=judge_config.model,
        success=True,
        latency_ms=response.latency_ms,
        error=None,
    )


def run_judge_health_check(
    judge_config: JudgeConfig,
    create_client_fn: Callable[[JudgeConfig], ModelClient] | None = None,
) -> tuple[bool, str | None]:
    """Execute a health check for the judge model.

    Uses qa_judge.infrastructure.model_clients.create_client if create_client_fn is not specified.

    Args:
        judge_config: Judge configuration
        create_client_fn: Function to create a model client (optional)

    Returns:
        (success, error_message): (True, None) on success, (False, error_message) on failure
    """
    if create_client_fn is None:
        from qa_judge.infrastructure.model_clients.factory import create_client
        create_client_fn = create_client

    result = health_check_judge(judge_config, create_client_fn)
    if result.success:
        return True, None

    error_msg = (
        f"Judge ({judge_config.model}) health check failed.\n"
        f"Error: {(result.error or 'Unknown error')[:200]}\n\n"
        f"Troubleshooting:\n"
        f"- For Gemini: Set GOOGLE_GENERATIVE_AI_API_KEY, or GCP_PROJECT_ID for Vertex AI\n"
        f"- For Claude: Set the ANTHROPIC_API_KEY environment variable\n"
        f"- For LMStudio: Verify LMStudio is running (LMSTUDIO_BASE_URL, default http://localhost:1234/v1)\n"
        f"- For OpenAI: Set the OPENAI_API_KEY environment variable"
    )
    return False, error_msg
