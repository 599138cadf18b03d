"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from qa_judge.use_cases.evaluation import Evaluator, run_evaluation
from qa_judge.use_cases.health_check import (
    HEALTH_CHECK_PROMPT,
    health_check_judge,
    run_judge_health_check,
)
from qa_judge.use_cases.statistics import (
    score_distribution,
    summarize_results,
    summarize_scores,
)

__all__ = [
    # evaluation
    "Evaluator",
    "run_evaluation",
    # health_check
    "HEALTH_CHECK_PROMPT",
    "health_check_judge",
    "run_judge_health_check",
    # statistics
    "score_distribution",
    "summarize_results",
    "summarize_scores",
]
