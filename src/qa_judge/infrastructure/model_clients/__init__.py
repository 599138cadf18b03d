"""
Model client package

Provides a unified interface to each judge LLM provider.
"""

from qa_judge.infrastructure.model_clients.base import ModelClient, RetryMixin
from qa_judge.infrastructure.model_clients.factory import create_client
from qa_judge.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "RetryMixin", "create_client"]
