"""
CLIランナーのテスト

ジャッジモデルはモッククライアントに差し替えて main() を通しで実行する。
"""

import json
from unittest.mock import patch

import pandas as pd
import pytest

from qa_judge.domain.value_objects import ModelResponse
from qa_judge.runner import format_progress_bar, main, parse_args


class MockModelClient:
    model_name = "mock-judge"

    def __init__(self, output="Score: 0.8\nReasoning: ok"):
        self.output = output
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return ModelResponse(output=self.output, latency_ms=1, model_name=self.model_name)


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """環境変数と .env 読み込みを無効化し、データセットCSVを用意する"""
    for key in ("JUDGE_MODEL", "EVAL_METRICS", "JUDGE_RETRY_DELAY", "JUDGE_BATCH_DELAY"):
        monkeypatch.delenv(key, raising=False)
    dataset = tmp_path / "qa.csv"
    pd.DataFrame([
        {"query": "What is 2+2?", "generation": "4", "ground_truth": "4", "context": "2+2=4"},
        {"query": "Capital of France?", "generation": "Paris", "ground_truth": "Paris", "context": ""},
    ]).to_csv(dataset, index=False)

    client = MockModelClient()
    with patch("qa_judge.runner.load_dotenv"), \
         patch("qa_judge.infrastructure.model_clients.factory.create_client", return_value=client):
        yield dataset, client


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(["--dataset", "qa"])
        assert args.dataset == "qa"
        assert args.datasets_dir == "datasets"
        assert args.max_samples is None
        assert args.no_csv is False
        assert args.health_check is False
        assert args.log_level == "WARNING"

    def test_dataset_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestFormatProgressBar:
    def test_half(self):
        bar = format_progress_bar(50)
        assert bar.count("#") == 20
        assert len(bar) == 42

    @pytest.mark.parametrize("pct,filled", [(0, 0), (100, 40), (150, 40), (-5, 0)])
    def test_clamped(self, pct, filled):
        assert format_progress_bar(pct).count("#") == filled


class TestMain:
    def test_full_run(self, cli_env, tmp_path, capsys):
        dataset, client = cli_env
        output = tmp_path / "out" / "run_results.json"

        code = main(["--dataset", str(dataset), "--output", str(output)])

        assert code == 0
        assert output.exists()
        assert output.with_suffix(".csv").exists()
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["completed_samples"] == 2
        assert set(data["metrics"]) == {"correctness", "context_precision", "answer_relevance", "faithfulness"}

        out = capsys.readouterr().out
        assert "Metric Averages" in out
        assert "80.00%" in out

    def test_metrics_and_max_samples(self, cli_env, tmp_path, capsys):
        dataset, client = cli_env
        output = tmp_path / "results.json"

        code = main([
            "--dataset", str(dataset), "--output", str(output),
            "--metrics", "correctness", "--max-samples", "1",
        ])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["total_samples"] == 1
        assert list(data["metrics"]) == ["correctness"]
        assert len(client.prompts) == 1

    def test_no_csv(self, cli_env, tmp_path):
        dataset, _ = cli_env
        output = tmp_path / "results.json"

        assert main(["--dataset", str(dataset), "--output", str(output), "--no-csv"]) == 0
        assert output.exists()
        assert not output.with_suffix(".csv").exists()

    def test_missing_dataset(self, cli_env, tmp_path, capsys):
        code = main(["--dataset", "missing", "--datasets-dir", str(tmp_path)])
        assert code == 1
        assert "ERROR:" in capsys.readouterr().out

    def test_unknown_metric(self, cli_env, tmp_path, capsys):
        dataset, _ = cli_env
        code = main(["--dataset", str(dataset), "--metrics", "bleu"])
        assert code == 1
        assert "bleu" in capsys.readouterr().out

    def test_health_check_failure(self, cli_env, tmp_path, capsys):
        dataset, client = cli_env
        with patch("qa_judge.runner.run_judge_health_check", return_value=(False, "boom")):
            code = main(["--dataset", str(dataset), "--health-check", "--output", str(tmp_path / "r.json")])

        assert code == 1
        assert "boom" in capsys.readouterr().out
        assert client.prompts == []

    def test_health_check_success(self, cli_env, tmp_path, capsys):
        dataset, _ = cli_env
        output = tmp_path / "r.json"
        code = main(["--dataset", str(dataset), "--health-check", "--metrics", "correctness", "--output", str(output)])

        assert code == 0
        assert "Judge Health Check" in capsys.readouterr().out
