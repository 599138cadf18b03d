"""
Domain Constants

Centrally manages constants shared across the evaluation engine.
"""

# Metrics in the fixed order they are evaluated for every sample
METRIC_NAMES = [
    "correctness",
    "context_precision",
    "answer_relevance",
    "faithfulness",
]

# Score distribution buckets: [0,0.2) [0.2,0.4) [0.4,0.6) [0.6,0.8) [0.8,1.0]
DISTRIBUTION_BUCKETS = [
    ("0.0-0.2", 0.0, 0.2),
    ("0.2-0.4", 0.2, 0.4),
    ("0.4-0.6", 0.4, 0.6),
    ("0.6-0.8", 0.6, 0.8),
    ("0.8-1.0", 0.8, 1.0),
]

# Default judge model
DEFAULT_JUDGE_MODEL = "gemini-2.5-flash-lite"

# Model pricing (USD / 1M tokens)
MODEL_PRICING = {
    "gemini-2.5-flash-lite": {"input": 0.075, "output": 0.30},
    "gemini-2.5-flash": {"input": 0.075, "output": 0.30},
    "gemini-2.5-pro": {"input": 1.25, "output": 5.0},
    "claude-haiku-4-5-20251001": {"input": 0.80, "output": 4.0},
    "claude-sonnet-4-5-20250929": {"input": 3.0, "output": 15.0},
}

# Default pricing for local models (LMStudio, etc.)
_LOCAL_MODEL_PRICING = {"input": 0.0, "output": 0.0}

# Rough token sizes per judge call, used for cost estimates
ESTIMATED_PROMPT_TOKENS = 500
ESTIMATED_RESPONSE_TOKENS = 300

# Derived flag thresholds
CORRECTNESS_KEY_FACTS_THRESHOLD = 0.7
CORRECTNESS_FACTUAL_SUPPORT_THRESHOLD = 0.5
CONTEXT_USEFUL_THRESHOLD = 0.6
CONTEXT_RELEVANT_THRESHOLD = 0.4
ANSWER_RELEVANT_THRESHOLD = 0.6
NONCOMMITTAL_THRESHOLD = 0.4
FAITHFUL_THRESHOLD = 0.7

# Neutral context precision score when there is nothing to judge against
NO_CONTEXT_SCORE = 0.5

# Statement count assumed when none can be recovered from the judge's reasoning
FALLBACK_STATEMENT_COUNT = 10

NO_CONTEXT_PLACEHOLDER = "No additional context provided"
