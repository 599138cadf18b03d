"""
LLM Judge client

Sends filled metric prompts to the judge model, validates the parsed score, and
retries failed or invalid attempts with a linear backoff. Batch submission runs
independent judge calls in bounded-concurrency chunks.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Mapping, Sequence

if TYPE_CHECKING:
    from qa_judge.infrastructure.model_clients.base import ModelClient

from qa_judge.domain.constants import (
    ESTIMATED_PROMPT_TOKENS,
    ESTIMATED_RESPONSE_TOKENS,
    MODEL_PRICING,
    _LOCAL_MODEL_PRICING,
)
from qa_judge.domain.exceptions import EvaluationCancelled, InvalidScoreError, JudgeCallError
from qa_judge.domain.value_objects import JudgeResponse
from qa_judge.harness_config import JudgeConfig
from qa_judge.infrastructure.model_clients.base import RetryMixin
from qa_judge.prompts.templates import PromptTemplate

logger = logging.getLogger(__name__)

CONNECTION_TEST_PROMPT = 'Say "OK" if you can read this.'


class JudgeClient(RetryMixin):
    """
    LLM-as-judge client

    Stateless with respect to evaluation runs: every call receives the template and
    variables it needs, so one instance can be shared across evaluators.
    """

    def __init__(
        self,
        model_client: ModelClient,
        *,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        batch_delay: float = 0.5,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """
        Args:
            model_client: Client for the judge model
            retry_attempts: Attempts per evaluation (default: 3)
            retry_delay: Base delay in seconds; attempt N waits retry_delay * N (default: 1.0)
            batch_delay: Delay in seconds between batch chunks (default: 0.5)
            cancel_event: Event that aborts pending retries when set
        """
        self._client = model_client
        self.max_retries = retry_attempts
        self.retry_delay = retry_delay
        self.batch_delay = batch_delay
        self.cancel_event = cancel_event

    @classmethod
    def from_config(
        cls,
        config: JudgeConfig,
        model_client: ModelClient | None = None,
        cancel_event: threading.Event | None = None,
    ) -> "JudgeClient":
        """Build a judge from JudgeConfig (creates the model client when not given)"""
        if model_client is None:
            from qa_judge.infrastructure.model_clients.factory import create_client
            model_client = create_client(config)
        return cls(
            model_client,
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_delay,
            batch_delay=config.batch_delay,
            cancel_event=cancel_event,
        )

    def with_cancel_event(self, cancel_event: threading.Event) -> "JudgeClient":
        """
        A judge sharing this model client and retry settings but honoring cancel_event

        This instance is left unchanged, so one JudgeClient can back several
        independently cancellable evaluators.
        """
        return JudgeClient(
            self._client,
            retry_attempts=self.max_retries,
            retry_delay=self.retry_delay,
            batch_delay=self.batch_delay,
            cancel_event=cancel_event,
        )

    @property
    def model_name(self) -> str:
        return getattr(self._client, "model_name", "unknown")

    def evaluate(self, template: PromptTemplate, variables: Mapping[str, object]) -> JudgeResponse:
        """
        Fill the template, call the judge, and parse the reply

        Args:
            template: Metric prompt template
            variables: Template variables

        Returns:
            JudgeResponse with a score in [0, 1]

        Raises:
            JudgeCallError: When every attempt failed or produced an out-of-range score
            EvaluationCancelled: When the cancel event was set
        """
        missing = template.missing_variables(variables)
        if missing:
            logger.debug("Template '%s' missing variables %s; placeholders left as-is", template.name, missing)
        prompt = template.fill(variables)

        def _attempt() -> JudgeResponse:
            response = self._client.generate(prompt)
            parsed = template.parser(response.output)
            if not 0.0 <= parsed.score <= 1.0:
                raise InvalidScoreError(f"Invalid score: {parsed.score}. Must be between 0 and 1.")
            return parsed

        try:
            return self._with_retry(_attempt, label=f"Judge '{template.name}'")
        except EvaluationCancelled:
            raise
        except Exception as e:
            logger.error(
                "Judge '%s' failed after %d attempts: %s", template.name, self.max_retries, e
            )
            raise JudgeCallError(
                f"Failed to evaluate after {self.max_retries} attempts. Last error: {e}",
                attempts=self.max_retries,
                last_error=e,
            ) from e

    def batch_evaluate(
        self,
        items: Sequence[tuple[PromptTemplate, Mapping[str, object]]],
        concurrency: int = 3,
    ) -> list[JudgeResponse]:
        """
        Evaluate independent (template, variables) pairs in bounded-concurrency chunks

        Each chunk of ``concurrency`` items runs in parallel and completes before the
        next one starts; ``batch_delay`` seconds separate chunks. Results keep the
        input order.

        Raises:
            ValueError: If concurrency is less than 1
            JudgeCallError: If any item fails permanently
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1.")

        results: list[JudgeResponse] = []
        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            for start in range(0, len(items), concurrency):
                chunk = items[start:start + concurrency]
                futures = [
                    executor.submit(self.evaluate, template, variables)
                    for template, variables in chunk
                ]
                # Wait for the whole chunk before surfacing the first failure
                outcomes = [(f.exception(), f) for f in futures]
                for error, future in outcomes:
                    if error is not None:
                        raise error
                    results.append(future.result())

                if start + concurrency < len(items):
                    self._wait(self.batch_delay)
        return results

    def test_connection(self) -> bool:
        """Return True when the judge model answers a trivial prompt"""
        try:
            response = self._client.generate(CONNECTION_TEST_PROMPT)
        except Exception as e:
            logger.error("Judge connection test failed: %s", e)
            return False
        return "ok" in response.output.lower()

    def estimate_cost(self, num_samples: int, num_metrics: int) -> dict[str, float]:
        """
        Rough token and USD estimate for evaluating num_samples x num_metrics calls

        Returns:
            {"estimated_tokens": int, "estimated_cost_usd": float}
        """
        calls = num_samples * num_metrics
        pricing = MODEL_PRICING.get(self.model_name, _LOCAL_MODEL_PRICING)
        input_cost = calls * ESTIMATED_PROMPT_TOKENS / 1_000_000 * pricing["input"]
        output_cost = calls * ESTIMATED_RESPONSE_TOKENS / 1_000_000 * pricing["output"]
        return {
            "estimated_tokens": calls * (ESTIMATED_PROMPT_TOKENS + ESTIMATED_RESPONSE_TOKENS),
            "estimated_cost_usd": input_cost + output_cost,
        }
