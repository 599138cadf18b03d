"""
Score Statistics

Reduces per-sample metric scores into dataset-level summary statistics.
"""

from typing import Iterable, Sequence

import pandas as pd

from qa_judge.domain.constants import DISTRIBUTION_BUCKETS, METRIC_NAMES
from qa_judge.domain.entities import EvaluationResult
from qa_judge.domain.value_objects import MetricSummary, empty_distribution


def score_distribution(scores: pd.Series) -> dict[str, int]:
    """
    Count scores per distribution bucket

    Buckets are half-open [lo, hi) except the last one, which also includes 1.0.

    Args:
        scores: Scores in [0, 1]

    Returns:
        {bucket label: count} with every bucket present
    """
    distribution = empty_distribution()
    last_label = DISTRIBUTION_BUCKETS[-1][0]
    for label, lo, hi in DISTRIBUTION_BUCKETS:
        if label == last_label:
            in_bucket = (scores >= lo) & (scores <= hi)
        else:
            in_bucket = (scores >= lo) & (scores < hi)
        distribution[label] = int(in_bucket.sum())
    return distribution


def summarize_scores(scores: Iterable[float]) -> MetricSummary:
    """
    Summary statistics for one metric

    The median is the element at index n // 2 of the ascending list (the upper
    middle element for even n). The standard deviation is the population one.

    Args:
        scores: Per-sample scores (missing scores must already be excluded)

    Returns:
        MetricSummary (zero-filled when there are no scores)
    """
    series = pd.Series(list(scores), dtype="float64")
    if series.empty:
        return MetricSummary()

    ordered = series.sort_values(ignore_index=True)
    return MetricSummary(
        average=float(ordered.mean()),
        min=float(ordered.iloc[0]),
        max=float(ordered.iloc[-1]),
        median=float(ordered.iloc[len(ordered) // 2]),
        std_dev=float(ordered.std(ddof=0)),
        distribution=score_distribution(ordered),
    )


def summarize_results(
    results: Sequence[EvaluationResult],
    metric_names: Sequence[str] = METRIC_NAMES,
) -> dict[str, MetricSummary]:
    """
    Summaries for every requested metric across completed results

    Results without a score for a metric are skipped for that metric.

    Args:
        results: Completed evaluation results
        metric_names: Metrics to summarize

    Returns:
        {metric name: MetricSummary}
    """
    return {
        name: summarize_scores(
            r.scores[name].score for r in results if name in r.scores
        )
        for name in metric_names
    }
