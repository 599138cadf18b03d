"""
harness_config.pyのテスト
"""

import pytest

from qa_judge.domain.constants import METRIC_NAMES
from qa_judge.domain.exceptions import ConfigError
from qa_judge.harness_config import (
    EvaluationConfig,
    JudgeConfig,
    load_config,
    load_judge_config,
)

ENV_KEYS = [
    "JUDGE_MODEL", "JUDGE_API_KEY", "JUDGE_TEMPERATURE", "JUDGE_MAX_TOKENS",
    "JUDGE_RETRY_ATTEMPTS", "JUDGE_RETRY_DELAY", "JUDGE_TIMEOUT_SECONDS",
    "JUDGE_CONCURRENCY", "JUDGE_BATCH_DELAY", "JUDGE_BASE_URL", "EVAL_METRICS",
]


@pytest.fixture
def clean_env(monkeypatch):
    """判定関連の環境変数をクリア"""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestJudgeConfig:
    """JudgeConfig dataclassのテスト"""

    def test_defaults(self):
        config = JudgeConfig()
        assert config.model == "gemini-2.5-flash-lite"
        assert config.temperature == 0.1
        assert config.max_tokens == 2048
        assert config.retry_attempts == 3
        assert config.retry_delay == 1.0
        assert config.concurrency == 3
        assert config.batch_delay == 0.5
        assert config.api_key is None


class TestEvaluationConfig:
    """EvaluationConfig dataclassのテスト"""

    def test_defaults(self):
        config = EvaluationConfig(dataset_path="datasets/qa.csv")
        assert config.metrics_to_run == METRIC_NAMES
        assert config.metrics_to_run is not METRIC_NAMES
        assert config.max_samples is None
        assert config.save_results is True
        assert isinstance(config.judge_config, JudgeConfig)

    def test_validate_ok(self):
        EvaluationConfig(dataset_path="x.csv", metrics_to_run=["correctness"]).validate()

    @pytest.mark.parametrize("kwargs,message", [
        ({"metrics_to_run": []}, "at least one metric"),
        ({"metrics_to_run": ["correctness", "bleu"]}, "bleu"),
        ({"max_samples": 0}, "max_samples"),
        ({"judge_config": JudgeConfig(retry_attempts=0)}, "retry_attempts"),
        ({"judge_config": JudgeConfig(concurrency=0)}, "concurrency"),
        ({"judge_config": JudgeConfig(retry_delay=-1.0)}, "non-negative"),
    ])
    def test_validate_errors(self, kwargs, message):
        config = EvaluationConfig(dataset_path="x.csv", **kwargs)
        with pytest.raises(ConfigError, match=message):
            config.validate()

    def test_model_name_defaults_to_judge_model(self):
        config = EvaluationConfig(dataset_path="x.csv", judge_config=JudgeConfig(model="gemini-2.5-pro"))
        assert config.model_name == "gemini-2.5-pro"

    def test_explicit_model_name_drives_judge(self):
        """model_name を指定した場合、ジャッジのモデルにも反映される"""
        judge_config = JudgeConfig()
        config = EvaluationConfig(
            dataset_path="x.csv",
            model_name="claude-haiku-4-5-20251001",
            judge_config=judge_config,
        )

        assert config.judge_config.model == "claude-haiku-4-5-20251001"
        assert judge_config.model == "gemini-2.5-flash-lite"
        config.validate()

    def test_validate_rejects_diverged_model_name(self):
        config = EvaluationConfig(dataset_path="x.csv")
        config.model_name = "claude-haiku-4-5-20251001"
        with pytest.raises(ConfigError, match="does not match"):
            config.validate()

    def test_ordered_metrics(self):
        config = EvaluationConfig(dataset_path="x.csv", metrics_to_run=["faithfulness", "correctness"])
        assert config.ordered_metrics() == ["correctness", "faithfulness"]

    def test_to_dict_masks_api_key(self):
        config = EvaluationConfig(dataset_path="x.csv", judge_config=JudgeConfig(api_key="secret"))
        d = config.to_dict()
        assert "evaluation_config" in d
        assert d["evaluation_config"]["judge_config"]["api_key"] == "***"
        assert config.judge_config.api_key == "secret"

    def test_roundtrip(self):
        original = EvaluationConfig(
            dataset_path="x.csv",
            metrics_to_run=["correctness"],
            max_samples=5,
            judge_config=JudgeConfig(model="claude-haiku-4-5-20251001", retry_attempts=4),
        )
        restored = EvaluationConfig.from_dict(original.to_dict())
        assert restored == original

    def test_from_dict_without_key(self):
        config = EvaluationConfig.from_dict({"dataset_path": "y.csv", "max_samples": 2})
        assert config.dataset_path == "y.csv"
        assert config.max_samples == 2
        assert config.judge_config == JudgeConfig()

    def test_from_dict_requires_dataset_path(self):
        with pytest.raises(ConfigError, match="dataset_path"):
            EvaluationConfig.from_dict({"evaluation_config": {}})


class TestLoadJudgeConfig:
    """load_judge_config関数のテスト（環境変数ベース）"""

    def test_defaults_without_env(self, clean_env):
        assert load_judge_config() == JudgeConfig()

    def test_env_overrides(self, clean_env):
        clean_env.setenv("JUDGE_MODEL", "lmstudio/qwen2.5-7b")
        clean_env.setenv("JUDGE_RETRY_ATTEMPTS", "5")
        clean_env.setenv("JUDGE_RETRY_DELAY", "0.25")
        clean_env.setenv("JUDGE_BASE_URL", "http://localhost:9999/v1")

        config = load_judge_config()

        assert config.model == "lmstudio/qwen2.5-7b"
        assert config.retry_attempts == 5
        assert config.retry_delay == 0.25
        assert config.base_url == "http://localhost:9999/v1"

    def test_invalid_int_raises_config_error(self, clean_env):
        clean_env.setenv("JUDGE_MAX_TOKENS", "lots")
        with pytest.raises(ConfigError, match="JUDGE_MAX_TOKENS"):
            load_judge_config()

    def test_invalid_float_raises_config_error(self, clean_env):
        clean_env.setenv("JUDGE_TEMPERATURE", "warm")
        with pytest.raises(ConfigError, match="JUDGE_TEMPERATURE"):
            load_judge_config()


class TestLoadConfig:
    """load_config関数のテスト"""

    def test_defaults(self, clean_env):
        config = load_config("datasets/qa.csv")
        assert config.dataset_path == "datasets/qa.csv"
        assert config.metrics_to_run == METRIC_NAMES
        assert config.model_name == "gemini-2.5-flash-lite"

    def test_model_argument_overrides_env(self, clean_env):
        clean_env.setenv("JUDGE_MODEL", "gemini-2.5-pro")
        config = load_config("qa.csv", model_name="claude-haiku-4-5-20251001")
        assert config.model_name == "claude-haiku-4-5-20251001"
        assert config.judge_config.model == "claude-haiku-4-5-20251001"

    def test_metrics_from_env(self, clean_env):
        clean_env.setenv("EVAL_METRICS", "correctness, faithfulness")
        config = load_config("qa.csv")
        assert config.metrics_to_run == ["correctness", "faithfulness"]

    def test_invalid_metric_raises(self, clean_env):
        with pytest.raises(ConfigError, match="bleu"):
            load_config("qa.csv", metrics_to_run=["bleu"])

    def test_invalid_max_samples_raises(self, clean_env):
        with pytest.raises(ConfigError):
            load_config("qa.csv", max_samples=0)
