"""
Evaluation Configuration

Manages loading from environment variables, default values, and validation.
"""

import os
from dataclasses import dataclass, field, asdict, replace

from qa_judge.domain.constants import DEFAULT_JUDGE_MODEL, METRIC_NAMES
from qa_judge.domain.exceptions import ConfigError


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ConfigError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ConfigError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def _env_list(key: str, default: list[str]) -> list[str]:
    """Convert an environment variable to a comma-separated list of strings"""
    val = os.environ.get(key)
    if val is None:
        return default
    return [x.strip() for x in val.split(",") if x.strip()]


@dataclass
class JudgeConfig:
    """Judge model configuration"""
    model: str = DEFAULT_JUDGE_MODEL
    api_key: str | None = None
    temperature: float = 0.1
    max_tokens: int = 2048
    retry_attempts: int = 3
    retry_delay: float = 1.0  # seconds; attempt N waits retry_delay * N
    timeout_seconds: int = 60
    concurrency: int = 3
    batch_delay: float = 0.5  # seconds between batch chunks
    base_url: str | None = None  # OpenAI-compatible endpoints only


@dataclass
class EvaluationConfig:
    """Configuration of one evaluation run"""
    dataset_path: str
    model_name: str | None = None  # judge model; overrides judge_config.model when given
    judge_config: JudgeConfig = field(default_factory=JudgeConfig)
    metrics_to_run: list[str] = field(default_factory=lambda: list(METRIC_NAMES))
    max_samples: int | None = None
    save_results: bool = True
    output_path: str | None = None

    def __post_init__(self):
        if self.model_name is None:
            self.model_name = self.judge_config.model
        elif self.model_name != self.judge_config.model:
            self.judge_config = replace(self.judge_config, model=self.model_name)

    def validate(self) -> None:
        """
        Validate the configuration

        Raises:
            ConfigError: On empty/unknown metrics, out-of-range numeric settings,
                or a model_name that disagrees with judge_config.model
        """
        if not self.metrics_to_run:
            raise ConfigError("metrics_to_run must contain at least one metric.")
        unknown = [m for m in self.metrics_to_run if m not in METRIC_NAMES]
        if unknown:
            raise ConfigError(f"Unknown metric(s): {unknown} (available: {METRIC_NAMES})")
        if self.max_samples is not None and self.max_samples < 1:
            raise ConfigError("max_samples must be at least 1.")
        if self.judge_config.retry_attempts < 1:
            raise ConfigError("retry_attempts must be at least 1.")
        if self.judge_config.concurrency < 1:
            raise ConfigError("concurrency must be at least 1.")
        if self.judge_config.retry_delay < 0 or self.judge_config.batch_delay < 0:
            raise ConfigError("retry_delay and batch_delay must be non-negative.")
        if self.model_name != self.judge_config.model:
            raise ConfigError(
                f"model_name ({self.model_name}) does not match judge_config.model ({self.judge_config.model})."
            )

    def ordered_metrics(self) -> list[str]:
        """Requested metrics in the fixed evaluation order"""
        return [m for m in METRIC_NAMES if m in self.metrics_to_run]

    def to_dict(self) -> dict:
        """Convert to dictionary format (the API key is masked)"""
        data = asdict(self)
        if data["judge_config"].get("api_key"):
            data["judge_config"]["api_key"] = "***"
        return {"evaluation_config": data}

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluationConfig":
        """Create from dictionary (handles presence/absence of evaluation_config key)"""
        config_data = dict(data.get("evaluation_config", data))
        if "dataset_path" not in config_data:
            raise ConfigError("dataset_path is required.")
        judge_config = JudgeConfig(**config_data.pop("judge_config", {}))
        return cls(judge_config=judge_config, **config_data)


def load_judge_config() -> JudgeConfig:
    """
    Load the judge configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        JudgeConfig
    """
    return JudgeConfig(
        model=_env_str("JUDGE_MODEL", DEFAULT_JUDGE_MODEL),
        # Provider-specific keys (GOOGLE_GENERATIVE_AI_API_KEY, ANTHROPIC_API_KEY, ...) are read by the clients
        api_key=os.environ.get("JUDGE_API_KEY"),
        temperature=_env_float("JUDGE_TEMPERATURE", 0.1),
        max_tokens=_env_int("JUDGE_MAX_TOKENS", 2048),
        retry_attempts=_env_int("JUDGE_RETRY_ATTEMPTS", 3),
        retry_delay=_env_float("JUDGE_RETRY_DELAY", 1.0),
        timeout_seconds=_env_int("JUDGE_TIMEOUT_SECONDS", 60),
        concurrency=_env_int("JUDGE_CONCURRENCY", 3),
        batch_delay=_env_float("JUDGE_BATCH_DELAY", 0.5),
        base_url=os.environ.get("JUDGE_BASE_URL"),
    )


def load_config(
    dataset_path: str,
    *,
    model_name: str | None = None,
    max_samples: int | None = None,
    output_path: str | None = None,
    metrics_to_run: list[str] | None = None,
    save_results: bool = True,
) -> EvaluationConfig:
    """
    Build and validate an EvaluationConfig (explicit arguments > environment > defaults)

    Args:
        dataset_path: Path to the dataset CSV
        model_name: Judge model name (falls back to JUDGE_MODEL)
        max_samples: Maximum number of samples to evaluate
        output_path: Path of the JSON summary to write
        metrics_to_run: Metrics to compute (falls back to EVAL_METRICS, then all metrics)
        save_results: Whether to persist the summary

    Returns:
        EvaluationConfig

    Raises:
        ConfigError: If the resulting configuration is invalid
    """
    judge_config = load_judge_config()
    if model_name:
        judge_config.model = model_name
    config = EvaluationConfig(
        dataset_path=dataset_path,
        model_name=judge_config.model,
        judge_config=judge_config,
        metrics_to_run=metrics_to_run if metrics_to_run is not None else _env_list("EVAL_METRICS", list(METRIC_NAMES)),
        max_samples=max_samples,
        save_results=save_results,
        output_path=output_path,
    )
    config.validate()
    return config
