"""
Domain Entities

Defines the primary data structures used in the evaluation process.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from qa_judge.domain.value_objects import METRIC_SCORE_TYPES, MetricScore, MetricSummary


@dataclass(frozen=True)
class Sample:
    """One (question, generated answer, expected answer) unit under evaluation"""
    id: str
    query: str
    generation: str
    ground_truth: str
    context: str | None = None
    metadata: dict = field(default_factory=dict)


@dataclass
class Dataset:
    """A named list of samples"""
    name: str
    samples: list[Sample]
    metadata: dict = field(default_factory=dict)


@dataclass
class EvaluationResult:
    """Result of a single evaluated sample (all requested metrics succeeded)"""
    sample_id: str
    query: str
    generation: str
    ground_truth: str
    scores: dict[str, MetricScore]
    timestamp: str
    context: str | None = None


@dataclass
class EvaluationProgress:
    """Progress snapshot pushed to the progress observer"""
    current_sample: int = 0
    total_samples: int = 0
    current_metric: str = ""
    status: str = "running"  # running / completed / failed / paused
    progress_percentage: float = 0.0


@dataclass
class EvaluationSummary:
    """Aggregated result of one evaluation run"""
    evaluation_id: str
    dataset_name: str
    total_samples: int
    completed_samples: int
    failed_samples: int
    started_at: str
    completed_at: str
    duration_seconds: float
    metrics: dict[str, MetricSummary]
    results: list[EvaluationResult]

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluationSummary":
        """Restore a summary written by ``to_dict`` (e.g. a persisted JSON file)"""
        metrics = {
            name: MetricSummary(**summary)
            for name, summary in data.get("metrics", {}).items()
        }
        results = []
        for r in data.get("results", []):
            scores = {
                name: METRIC_SCORE_TYPES.get(name, MetricScore)(**payload)
                for name, payload in r.get("scores", {}).items()
            }
            results.append(EvaluationResult(
                sample_id=r["sample_id"],
                query=r["query"],
                generation=r["generation"],
                ground_truth=r["ground_truth"],
                scores=scores,
                timestamp=r["timestamp"],
                context=r.get("context"),
            ))
        return cls(
            evaluation_id=data["evaluation_id"],
            dataset_name=data["dataset_name"],
            total_samples=data["total_samples"],
            completed_samples=data["completed_samples"],
            failed_samples=data["failed_samples"],
            started_at=data["started_at"],
            completed_at=data.get("completed_at", ""),
            duration_seconds=data.get("duration_seconds", 0.0),
            metrics=metrics,
            results=results,
        )


@dataclass
class HealthCheckResult:
    """Judge health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None
