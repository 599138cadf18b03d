"""
Model client base class and retry mixin

Defines the abstract base class inherited by all model clients
and the RetryMixin that consolidates shared retry logic.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod

from qa_judge.domain.exceptions import EvaluationCancelled
from qa_judge.domain.value_objects import ModelResponse

logger = logging.getLogger(__name__)


class RetryMixin:
    """
    Linear backoff retry. Subclasses set self.max_retries and self.retry_delay.

    Attempt N (1-based) that fails waits retry_delay * N seconds before the next one.
    When self.cancel_event is set, waits are interruptible and a set event aborts
    the loop with EvaluationCancelled.
    """

    max_retries: int = 3
    retry_delay: float = 1.0
    cancel_event: threading.Event | None = None

    def _with_retry(self, fn, retryable_exceptions=(Exception,), label: str = "call"):
        """
        Execute with linear backoff retry.

        Args:
            fn: The function to retry (a callable with no arguments)
            retryable_exceptions: Tuple of exception types eligible for retry
            label: Name used in log messages

        Returns:
            The return value of fn()

        Raises:
            ValueError: If max_retries is less than 1
            EvaluationCancelled: If the cancel event is set before or between attempts
            Exception: The last exception if max retries are exceeded
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

        last_exception: Exception | None = None
        for attempt in range(self.max_retries):
            self._raise_if_cancelled(label)
            try:
                return fn()
            except retryable_exceptions as e:
                last_exception = e
                logger.warning(
                    "%s attempt %d/%d failed: %s", label, attempt + 1, self.max_retries, e
                )
                if attempt < self.max_retries - 1:
                    self._wait(self.retry_delay * (attempt + 1))

        assert last_exception is not None
        raise last_exception

    def _wait(self, seconds: float) -> None:
        if self.cancel_event is not None:
            self.cancel_event.wait(seconds)
        else:
            time.sleep(seconds)

    def _raise_if_cancelled(self, label: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise EvaluationCancelled(f"{label} cancelled")


class ModelClient(ABC):
    """Abstract base class for model clients"""

    model_name: str

    @abstractmethod
    def generate(self, prompt: str) -> ModelResponse:
        """Send a prompt and retrieve the response"""
        pass
