"""
Prompts sub-package

Provides the metric prompt templates, their response parsers, and the template registry.
"""

from qa_judge.prompts.templates import (
    ANSWER_RELEVANCE_TEMPLATE,
    CONTEXT_PRECISION_TEMPLATE,
    CORRECTNESS_TEMPLATE,
    FAITHFULNESS_TEMPLATE,
    PromptTemplate,
    TemplateRegistry,
    clamp_score,
    extract_reasoning,
    extract_score,
    extract_structured,
    fill_template,
)

__all__ = [
    "ANSWER_RELEVANCE_TEMPLATE",
    "CONTEXT_PRECISION_TEMPLATE",
    "CORRECTNESS_TEMPLATE",
    "FAITHFULNESS_TEMPLATE",
    "PromptTemplate",
    "TemplateRegistry",
    "clamp_score",
    "extract_reasoning",
    "extract_score",
    "extract_structured",
    "fill_template",
]
