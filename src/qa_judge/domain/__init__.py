"""
Domain Layer

Defines constants, entities, value objects, and exceptions that form the core of
the evaluation logic. Has no dependencies on external libraries.
"""

from qa_judge.domain.constants import (
    DEFAULT_JUDGE_MODEL,
    DISTRIBUTION_BUCKETS,
    METRIC_NAMES,
    MODEL_PRICING,
)
from qa_judge.domain.entities import (
    Dataset,
    EvaluationProgress,
    EvaluationResult,
    EvaluationSummary,
    HealthCheckResult,
    Sample,
)
from qa_judge.domain.exceptions import (
    ConfigError,
    DatasetLoadError,
    EvaluationCancelled,
    InvalidScoreError,
    JudgeCallError,
    PersistenceError,
    QAJudgeError,
)
from qa_judge.domain.value_objects import (
    AnswerRelevanceScore,
    ContextPrecisionScore,
    CorrectnessScore,
    FaithfulnessScore,
    JudgeResponse,
    MetricScore,
    MetricSummary,
    ModelResponse,
)

__all__ = [
    # constants
    "DEFAULT_JUDGE_MODEL",
    "DISTRIBUTION_BUCKETS",
    "METRIC_NAMES",
    "MODEL_PRICING",
    # entities
    "Dataset",
    "EvaluationProgress",
    "EvaluationResult",
    "EvaluationSummary",
    "HealthCheckResult",
    "Sample",
    # exceptions
    "ConfigError",
    "DatasetLoadError",
    "EvaluationCancelled",
    "InvalidScoreError",
    "JudgeCallError",
    "PersistenceError",
    "QAJudgeError",
    # value objects
    "AnswerRelevanceScore",
    "ContextPrecisionScore",
    "CorrectnessScore",
    "FaithfulnessScore",
    "JudgeResponse",
    "MetricScore",
    "MetricSummary",
    "ModelResponse",
]
