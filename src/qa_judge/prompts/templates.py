"""
Prompt templates for the evaluation metrics

Each template pairs a ``{{var}}``-placeholder prompt with a parser that turns the
judge's free-form reply into a JudgeResponse. Parsing is best-effort:

1. Structured payload: a JSON object with a numeric "score" (optionally in a code block)
2. Labeled pattern: ``Score: 0.8``
3. First standalone ``0.x`` / ``1`` / ``1.0`` token
4. 0.0 with a warning
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Mapping

from qa_judge.domain.value_objects import JudgeResponse

logger = logging.getLogger(__name__)

_LABELED_SCORE_RE = re.compile(r"score[:\s]+([0-9]*\.?[0-9]+)", re.IGNORECASE)
_BARE_SCORE_RE = re.compile(r"\b(0\.[0-9]+|1\.0|1)\b")
_REASONING_RE = re.compile(r"(?:reasoning|explanation)[:\s]+(.+)", re.IGNORECASE | re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

_GENERATED_QUESTION_RE = re.compile(r"generated question[:\s]+(.+?)(?:\n|$)", re.IGNORECASE)
_NONCOMMITTAL_RE = re.compile(r"noncommittal[:\s]+([01])", re.IGNORECASE)
_STATEMENTS_SECTION_RE = re.compile(r"statements[:\s]+(.+?)(?:faithful|score|reasoning)", re.IGNORECASE | re.DOTALL)
_NUMBERED_ITEM_RE = re.compile(r"(?:^|\n)\s*\d+\.\s+(.+?)(?=\n\s*\d+\.|\n|$)")
_FAITHFUL_COUNT_RE = re.compile(r"faithful statements[:\s]+(\d+)", re.IGNORECASE)
_TOTAL_COUNT_RE = re.compile(r"total statements[:\s]+(\d+)", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Parser helpers
# ---------------------------------------------------------------------------

def fill_template(template: str, variables: Mapping[str, object]) -> str:
    """
    Replace every ``{{key}}`` occurrence with its value

    Placeholders without a matching variable are left verbatim.
    """
    filled = template
    for key, value in variables.items():
        filled = filled.replace("{{" + key + "}}", str(value))
    return filled


def clamp_score(value: float) -> float:
    """Clamp score to the range 0.0-1.0"""
    return max(0.0, min(1.0, value))


def extract_score(text: str) -> float:
    """
    Extract a score from free text (unclamped)

    Looks for "Score: X" first, then the first standalone number in [0, 1].
    Returns 0.0 and logs a warning when nothing matches.
    """
    m = _LABELED_SCORE_RE.search(text)
    if m:
        return float(m.group(1))

    m = _BARE_SCORE_RE.search(text)
    if m:
        return float(m.group(1))

    logger.warning("Could not extract score from response: %s", text[:200])
    return 0.0


def extract_reasoning(text: str) -> str:
    """Text after a "Reasoning:" / "Explanation:" label, or the whole response"""
    m = _REASONING_RE.search(text)
    if m:
        return m.group(1).strip()
    return text.strip()


def extract_structured(text: str) -> dict | None:
    """
    Return the JSON object in the response if it carries a numeric "score"

    Accepts a bare JSON object or one wrapped in a fenced code block.
    """
    match = _CODE_BLOCK_RE.search(text)
    json_text = match.group(1) if match else text.strip()
    try:
        data = json.loads(json_text)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict) or "score" not in data:
        return None
    try:
        data["score"] = float(data["score"])
    except (TypeError, ValueError):
        return None
    return data


def parse_score_and_reasoning(response: str) -> JudgeResponse:
    """Default parser: score + reasoning, structured payload first"""
    data = extract_structured(response)
    if data is not None:
        reasoning = data.get("reasoning") or data.get("explanation") or data.get("reason")
        return JudgeResponse(
            score=clamp_score(data["score"]),
            reasoning=str(reasoning).strip() if reasoning else response.strip(),
            raw_response=response,
            metadata={"structured": True},
        )
    return JudgeResponse(
        score=clamp_score(extract_score(response)),
        reasoning=extract_reasoning(response),
        raw_response=response,
    )


def _parse_answer_relevance(response: str) -> JudgeResponse:
    parsed = parse_score_and_reasoning(response)
    data = extract_structured(response)

    if data is not None:
        generated_question = str(data.get("generated_question") or "")
        try:
            noncommittal = 1 if int(data.get("noncommittal", 0)) == 1 else 0
        except (TypeError, ValueError):
            noncommittal = 0
    else:
        m = _GENERATED_QUESTION_RE.search(response)
        generated_question = m.group(1).strip() if m else ""
        m = _NONCOMMITTAL_RE.search(response)
        noncommittal = int(m.group(1)) if m else 0

    parsed.metadata.update({
        "generated_question": generated_question,
        "noncommittal": noncommittal,
    })
    return parsed


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def extract_numbered_items(text: str) -> list[str]:
    """Items of a ``1. ...`` / ``2. ...`` numbered list"""
    return [m.group(1).strip() for m in _NUMBERED_ITEM_RE.finditer(text) if m.group(1).strip()]


def _parse_faithfulness(response: str) -> JudgeResponse:
    parsed = parse_score_and_reasoning(response)
    data = extract_structured(response)

    statements: list[str] = []
    faithful_count = 0
    total_count = 0
    if data is not None and isinstance(data.get("statements"), list):
        statements = [str(s).strip() for s in data["statements"] if str(s).strip()]
        faithful_count = _as_int(data.get("faithful_statements"), 0)
        total_count = _as_int(data.get("total_statements"), len(statements))
    else:
        section = _STATEMENTS_SECTION_RE.search(response)
        if section:
            statements = extract_numbered_items(section.group(1))
        m = _FAITHFUL_COUNT_RE.search(response)
        faithful_count = int(m.group(1)) if m else 0
        m = _TOTAL_COUNT_RE.search(response)
        total_count = int(m.group(1)) if m else len(statements)

    parsed.metadata.update({
        "statements": statements,
        "faithful_statements": faithful_count,
        "total_statements": total_count,
    })
    return parsed


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PromptTemplate:
    """Parameterized judge prompt plus the parser for its reply"""
    name: str
    description: str
    template: str
    variables: tuple[str, ...]
    parser: Callable[[str], JudgeResponse] = field(default=parse_score_and_reasoning, compare=False)

    def fill(self, variables: Mapping[str, object]) -> str:
        return fill_template(self.template, variables)

    def missing_variables(self, variables: Mapping[str, object]) -> list[str]:
        return [v for v in self.variables if v not in variables]


CORRECTNESS_TEMPLATE = PromptTemplate(
    name="Correctness",
    description="Evaluate the correctness of the generation on a continuous scale from 0 to 1",
    variables=("query", "generation", "ground_truth"),
    template="""Evaluate the correctness of the generation on a continuous scale from 0 to 1. A generation can be considered correct (Score: 1) if it includes all the key facts from the ground truth and if every fact presented in the generation is factually supported by the ground truth or common sense.

Example:
Query: Can eating carrots improve your vision?
Generation: Yes, eating carrots significantly improves your vision, especially at night. This is why people who eat lots of carrots never need glasses. Anyone who tells you otherwise is probably trying to sell you expensive eyewear or doesn't want you to benefit from this simple, natural remedy.
Ground truth: Well, yes and no. Carrots won't improve your visual acuity if you have less than perfect vision. But the vitamins found in the vegetable can help promote overall eye health. Carrots contain beta-carotene, a substance that the body converts to vitamin A, an important nutrient for eye health. However, if your vision problems aren't related to vitamin A, your vision won't change no matter how many carrots you eat.
Score: 0.1
Reasoning: While the generation mentions that carrots can improve vision, it fails to outline the reason for this phenomenon and the circumstances under which this is the case. The rest of the response contains misinformation and exaggerations. It deviates significantly from the more accurate and nuanced explanation provided in the ground truth.

Input:
Query: {{query}}
Generation: {{generation}}
Ground truth: {{ground_truth}}

Think step by step. Provide your evaluation in this format:
Score: [0.0 to 1.0]
Reasoning: [Your detailed explanation]""",
)

CONTEXT_PRECISION_TEMPLATE = PromptTemplate(
    name="Context Precision",
    description="Verify if the context was useful in arriving at the given answer",
    variables=("question", "answer", "context"),
    template="""Given question, answer and context verify if the context was useful in arriving at the given answer.

Evaluate on a scale from 0 to 1:
- Score 1.0: The context was highly useful and directly contributed to the answer
- Score 0.5: The context was partially useful but not essential
- Score 0.0: The context was not useful or irrelevant to the answer

Question: {{question}}
Answer: {{answer}}
Context: {{context}}

Think step by step. Consider:
1. Does the context contain information present in the answer?
2. Would the answer be possible without this context?
3. How much of the context was actually used?

Provide your evaluation in this format:
Score: [0.0 to 1.0]
Reasoning: [Your detailed explanation]""",
)

ANSWER_RELEVANCE_TEMPLATE = PromptTemplate(
    name="Answer Relevance",
    description="Generate a question for the given answer and identify if answer is noncommittal",
    variables=("answer",),
    template="""Generate a question for the given answer and identify if answer is noncommittal.

Give noncommittal as 1 if the answer is noncommittal and 0 if the answer is committal. A noncommittal answer is one that is evasive, vague, or ambiguous. For example, 'I don't know' or 'I'm not sure' are noncommittal answers.

Answer: {{answer}}

Think step by step:
1. What question would this answer be responding to?
2. Is the answer direct and specific, or vague and evasive?
3. Does the answer provide concrete information or avoid commitment?

Calculate the relevance score (0 to 1):
- If noncommittal: score should be lower (0.0-0.4)
- If committal and relevant: score should be higher (0.6-1.0)

Provide your evaluation in this format:
Generated Question: [The question this answer would respond to]
Noncommittal: [0 or 1]
Score: [0.0 to 1.0]
Reasoning: [Your detailed explanation]""",
    parser=_parse_answer_relevance,
)

FAITHFULNESS_TEMPLATE = PromptTemplate(
    name="Faithfulness",
    description="Analyze complexity and break down answer into verifiable statements",
    variables=("question", "answer", "context"),
    template="""Given a question, an answer and its context, analyze the complexity of each sentence in the answer. Break down each sentence into one or more fully understandable statements. Ensure that no pronouns are used in any statement.

Question: {{question}}
Answer: {{answer}}
Context: {{context}}

Instructions:
1. Break down the answer into atomic statements
2. Replace all pronouns with their referents
3. Verify each statement for faithfulness to the context and the original answer
4. Count total statements and faithful statements

Calculate faithfulness score:
Score = (Number of faithful statements) / (Total number of statements)

Provide your evaluation in this format:
Statements:
1. [First atomic statement]
2. [Second atomic statement]
...

Faithful Statements: [count]
Total Statements: [count]
Score: [0.0 to 1.0]
Reasoning: [Your detailed explanation]""",
    parser=_parse_faithfulness,
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TemplateRegistry:
    """Explicit metric name -> PromptTemplate table"""

    def __init__(self, templates: Mapping[str, PromptTemplate] | None = None):
        self._templates: dict[str, PromptTemplate] = dict(templates or {})

    def register(self, metric_name: str, template: PromptTemplate) -> None:
        self._templates[metric_name] = template

    def get(self, metric_name: str) -> PromptTemplate:
        if metric_name not in self._templates:
            raise KeyError(f"No prompt template registered for metric '{metric_name}'")
        return self._templates[metric_name]

    def names(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, metric_name: str) -> bool:
        return metric_name in self._templates

    @classmethod
    def default(cls) -> "TemplateRegistry":
        return cls({
            "correctness": CORRECTNESS_TEMPLATE,
            "context_precision": CONTEXT_PRECISION_TEMPLATE,
            "answer_relevance": ANSWER_RELEVANCE_TEMPLATE,
            "faithfulness": FAITHFULNESS_TEMPLATE,
        })

