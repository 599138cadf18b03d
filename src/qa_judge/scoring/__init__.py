"""
Scoring sub-package

Provides the LLM judge client and the per-metric evaluators built on it.
"""

from qa_judge.domain.exceptions import InvalidScoreError
from qa_judge.scoring.judge import CONNECTION_TEST_PROMPT, JudgeClient
from qa_judge.scoring.metrics import (
    METRIC_EVALUATORS,
    evaluate_answer_relevance,
    evaluate_context_precision,
    evaluate_correctness,
    evaluate_faithfulness,
    metadata_context,
    metadata_digest,
    score_metric,
)

__all__ = [
    # judge
    "CONNECTION_TEST_PROMPT",
    "InvalidScoreError",
    "JudgeClient",
    # metric evaluators
    "METRIC_EVALUATORS",
    "evaluate_answer_relevance",
    "evaluate_context_precision",
    "evaluate_correctness",
    "evaluate_faithfulness",
    "metadata_context",
    "metadata_digest",
    "score_metric",
]
