"""
Domain Value Objects

Defines immutable data structures representing values such as model responses,
parsed judge responses, per-metric scores, and metric summaries.
"""

from dataclasses import dataclass, field

from qa_judge.domain.constants import DISTRIBUTION_BUCKETS


@dataclass
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class JudgeResponse:
    """Parsed judge output (score + reasoning + raw text)"""

    score: float
    reasoning: str
    raw_response: str
    metadata: dict = field(default_factory=dict)


@dataclass
class MetricScore:
    """Base metric score (score in [0, 1] + reasoning)"""
    score: float
    reasoning: str
    metadata: dict = field(default_factory=dict)


@dataclass
class CorrectnessScore(MetricScore):
    """Correctness against the ground truth"""
    key_facts_included: bool = False
    factual_support: bool = False


@dataclass
class ContextPrecisionScore(MetricScore):
    """Usefulness of the context for arriving at the answer"""
    context_useful: bool = False
    context_relevant: bool = False


@dataclass
class AnswerRelevanceScore(MetricScore):
    """Relevance / commitment of the generated answer"""
    noncommittal: int = 0  # 1 = evasive answer, 0 = committal answer
    generated_question: str | None = None


@dataclass
class FaithfulnessScore(MetricScore):
    """Statement-level faithfulness of the generated answer"""
    statements: list[str] = field(default_factory=list)
    faithful_statements: int = 0
    total_statements: int = 0


# Score type per metric name (used when restoring persisted summaries)
METRIC_SCORE_TYPES: dict[str, type[MetricScore]] = {
    "correctness": CorrectnessScore,
    "context_precision": ContextPrecisionScore,
    "answer_relevance": AnswerRelevanceScore,
    "faithfulness": FaithfulnessScore,
}


def empty_distribution() -> dict[str, int]:
    """Zero-filled distribution with every bucket present"""
    return {label: 0 for label, _, _ in DISTRIBUTION_BUCKETS}


@dataclass
class MetricSummary:
    """Summary statistics for one metric across a run"""
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    distribution: dict[str, int] = field(default_factory=empty_distribution)

    @property
    def count(self) -> int:
        """Number of scores the summary was computed from"""
        return sum(self.distribution.values())
