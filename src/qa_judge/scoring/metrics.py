"""
Metric evaluators

One function per quality dimension. Each builds the template variables from a
sample (enriched with its metadata), calls the judge exactly once, and turns the
JudgeResponse into a typed metric score. Context precision skips the judge call
when the sample has neither context nor usable metadata.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from qa_judge.scoring.judge import JudgeClient

from qa_judge.domain.constants import (
    ANSWER_RELEVANT_THRESHOLD,
    CONTEXT_RELEVANT_THRESHOLD,
    CONTEXT_USEFUL_THRESHOLD,
    CORRECTNESS_FACTUAL_SUPPORT_THRESHOLD,
    CORRECTNESS_KEY_FACTS_THRESHOLD,
    FAITHFUL_THRESHOLD,
    FALLBACK_STATEMENT_COUNT,
    NO_CONTEXT_PLACEHOLDER,
    NO_CONTEXT_SCORE,
    NONCOMMITTAL_THRESHOLD,
)
from qa_judge.domain.entities import Sample
from qa_judge.domain.value_objects import (
    AnswerRelevanceScore,
    ContextPrecisionScore,
    CorrectnessScore,
    FaithfulnessScore,
    MetricScore,
)
from qa_judge.prompts.templates import TemplateRegistry, extract_numbered_items

_DEFAULT_REGISTRY = TemplateRegistry.default()


def _registry_or_default(registry: TemplateRegistry | None) -> TemplateRegistry:
    return registry if registry is not None else _DEFAULT_REGISTRY


def _metadata_parts(sample: Sample, labels: dict[str, str]) -> list[str]:
    """Formatted "<label><value>" strings for the metadata keys present on the sample"""
    parts = []
    for key, label in labels.items():
        value = sample.metadata.get(key) if sample.metadata else None
        if value:
            parts.append(f"{label}{value}")
    return parts


def metadata_digest(sample: Sample, include_question_number: bool = True) -> str:
    """One-line "Category: x | Source: y | Question #n" digest ("" when nothing is known)"""
    labels = {"category": "Category: ", "source": "Source: "}
    if include_question_number:
        labels["question_number"] = "Question #"
    return " | ".join(_metadata_parts(sample, labels))


def metadata_context(sample: Sample, source_label: str = "Source Document: ", include_question_number: bool = True) -> str:
    """Multi-line context synthesized from sample metadata ("" when nothing is known)"""
    labels = {"category": "Topic: ", "source": source_label}
    if include_question_number:
        labels["question_number"] = "Question Number: "
    return "\n".join(_metadata_parts(sample, labels))


def evaluate_correctness(
    sample: Sample,
    judge: JudgeClient,
    registry: TemplateRegistry | None = None,
) -> CorrectnessScore:
    """Does the generation include the ground truth's key facts, all factually supported?"""
    query = sample.query
    digest = metadata_digest(sample)
    if digest:
        query = f"{sample.query}\n[Metadata: {digest}]"

    response = judge.evaluate(
        _registry_or_default(registry).get("correctness"),
        {
            "query": query,
            "generation": sample.generation,
            "ground_truth": sample.ground_truth,
        },
    )

    return CorrectnessScore(
        score=response.score,
        reasoning=response.reasoning,
        key_facts_included=response.score > CORRECTNESS_KEY_FACTS_THRESHOLD,
        factual_support=response.score > CORRECTNESS_FACTUAL_SUPPORT_THRESHOLD,
        metadata={
            "raw_response": response.raw_response,
            "sample_metadata": dict(sample.metadata),
        },
    )


def evaluate_context_precision(
    sample: Sample,
    judge: JudgeClient,
    registry: TemplateRegistry | None = None,
) -> ContextPrecisionScore:
    """Was the context useful in arriving at the answer?"""
    context = sample.context or metadata_context(sample)

    if not context:
        return ContextPrecisionScore(
            score=NO_CONTEXT_SCORE,
            reasoning="No context available for evaluation. Assuming neutral relevance.",
            context_useful=False,
            context_relevant=False,
            metadata={
                "had_context": False,
                "used_metadata": bool(sample.metadata),
            },
        )

    response = judge.evaluate(
        _registry_or_default(registry).get("context_precision"),
        {
            "question": sample.query,
            "answer": sample.generation,
            "context": context,
        },
    )

    return ContextPrecisionScore(
        score=response.score,
        reasoning=response.reasoning,
        context_useful=response.score > CONTEXT_USEFUL_THRESHOLD,
        context_relevant=response.score > CONTEXT_RELEVANT_THRESHOLD,
        metadata={
            "raw_response": response.raw_response,
            "had_explicit_context": bool(sample.context),
            "used_metadata_as_context": not sample.context,
            "sample_metadata": dict(sample.metadata),
        },
    )


def evaluate_answer_relevance(
    sample: Sample,
    judge: JudgeClient,
    registry: TemplateRegistry | None = None,
) -> AnswerRelevanceScore:
    """Is the answer direct and committal rather than vague or evasive?"""
    question = sample.query
    digest = metadata_digest(sample, include_question_number=False)
    if digest:
        question = f"{sample.query}\n[Context: {digest}]"

    # The template only renders the answer; the question is passed for custom templates
    response = judge.evaluate(
        _registry_or_default(registry).get("answer_relevance"),
        {
            "question": question,
            "answer": sample.generation,
        },
    )

    return AnswerRelevanceScore(
        score=response.score,
        reasoning=response.reasoning,
        noncommittal=1 if response.score < NONCOMMITTAL_THRESHOLD else 0,
        generated_question=response.metadata.get("generated_question") or None,
        metadata={
            "raw_response": response.raw_response,
            "sample_metadata": dict(sample.metadata),
            "is_relevant": response.score > ANSWER_RELEVANT_THRESHOLD,
            "has_evasive_language": response.score < NONCOMMITTAL_THRESHOLD,
            "judge_noncommittal": response.metadata.get("noncommittal"),
        },
    )


def evaluate_faithfulness(
    sample: Sample,
    judge: JudgeClient,
    registry: TemplateRegistry | None = None,
) -> FaithfulnessScore:
    """Break the answer into atomic statements and measure how many are faithful"""
    context = sample.context or metadata_context(
        sample, source_label="Reference: ", include_question_number=False
    )

    question = sample.query
    question_number = sample.metadata.get("question_number") if sample.metadata else None
    if question_number:
        question = f"[Question #{question_number}] {sample.query}"

    response = judge.evaluate(
        _registry_or_default(registry).get("faithfulness"),
        {
            "question": question,
            "answer": sample.generation,
            "context": context or NO_CONTEXT_PLACEHOLDER,
        },
    )

    statements = extract_numbered_items(response.reasoning)
    if not statements:
        statements = list(response.metadata.get("statements") or [])

    total_statements = len(statements) or FALLBACK_STATEMENT_COUNT
    faithful_statements = round(response.score * total_statements)

    return FaithfulnessScore(
        score=response.score,
        reasoning=response.reasoning,
        statements=statements,
        faithful_statements=faithful_statements,
        total_statements=total_statements,
        metadata={
            "raw_response": response.raw_response,
            "used_metadata_context": not sample.context and bool(sample.metadata),
            "sample_metadata": dict(sample.metadata),
            "is_faithful": response.score > FAITHFUL_THRESHOLD,
        },
    )


MetricEvaluator = Callable[[Sample, "JudgeClient", "TemplateRegistry | None"], MetricScore]

METRIC_EVALUATORS: dict[str, MetricEvaluator] = {
    "correctness": evaluate_correctness,
    "context_precision": evaluate_context_precision,
    "answer_relevance": evaluate_answer_relevance,
    "faithfulness": evaluate_faithfulness,
}


def score_metric(
    metric_name: str,
    sample: Sample,
    judge: JudgeClient,
    registry: TemplateRegistry | None = None,
) -> MetricScore:
    """
    Evaluate one metric for one sample

    Raises:
        ValueError: When an unknown metric name is specified
        JudgeCallError: When the judge fails permanently
    """
    evaluator = METRIC_EVALUATORS.get(metric_name)
    if evaluator is None:
        raise ValueError(f"Unknown metric: {metric_name} (available: {list(METRIC_EVALUATORS.keys())})")
    return evaluator(sample, judge, registry)
