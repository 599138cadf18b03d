"""
reporting.pyのテスト
"""

import json

import pandas as pd
import pytest

from qa_judge.domain.entities import EvaluationResult, EvaluationSummary
from qa_judge.domain.exceptions import PersistenceError
from qa_judge.domain.value_objects import (
    ContextPrecisionScore,
    CorrectnessScore,
    MetricSummary,
)
from qa_judge.reporting import (
    export_to_csv,
    list_evaluations,
    load_summary,
    save_summary,
    summary_to_dataframe,
)


def _summary(evaluation_id="eval-1", started_at="2026-01-01T12:00:00") -> EvaluationSummary:
    results = [
        EvaluationResult(
            sample_id="sample_1",
            query="What is the capital of France?",
            generation="Paris, of course.",
            ground_truth="Paris",
            scores={
                "correctness": CorrectnessScore(score=0.91234, reasoning="Correct, concise", key_facts_included=True),
                "context_precision": ContextPrecisionScore(score=0.5, reasoning="No context available"),
            },
            timestamp="2026-01-01T12:00:01",
            context="France, capital: Paris",
        ),
        EvaluationResult(
            sample_id="sample_2",
            query="2+2?",
            generation="4",
            ground_truth="4",
            scores={"correctness": CorrectnessScore(score=1.0, reasoning="exact")},
            timestamp="2026-01-01T12:00:02",
        ),
    ]
    return EvaluationSummary(
        evaluation_id=evaluation_id,
        dataset_name="geo",
        total_samples=3,
        completed_samples=2,
        failed_samples=1,
        started_at=started_at,
        completed_at=started_at,
        duration_seconds=1.5,
        metrics={"correctness": MetricSummary(average=0.95617, min=0.91234, max=1.0, median=1.0)},
        results=results,
    )


class TestSaveAndLoadSummary:
    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "results.json"

        written = save_summary(_summary(), path)

        assert written == path
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["evaluation_id"] == "eval-1"
        assert data["results"][0]["scores"]["correctness"]["score"] == pytest.approx(0.91234)

    def test_pretty_printed(self, tmp_path):
        path = save_summary(_summary(), tmp_path / "results.json")
        assert "\n  " in path.read_text(encoding="utf-8")

    def test_round_trip(self, tmp_path):
        summary = _summary()
        path = save_summary(summary, tmp_path / "results.json")
        assert load_summary(path) == summary

    def test_write_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(PersistenceError):
            save_summary(_summary(), blocker / "results.json")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            load_summary(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        with pytest.raises(PersistenceError):
            load_summary(path)


class TestExportToCsv:
    def test_columns(self):
        df = summary_to_dataframe(_summary())
        assert list(df.columns[:5]) == ["sample_id", "query", "generation", "ground_truth", "context"]
        assert "faithfulness_score" in df.columns
        assert "answer_relevance_reasoning" in df.columns
        assert df.columns[-1] == "timestamp"

    def test_scores_round_trip_within_tolerance(self, tmp_path):
        summary = _summary()
        path = export_to_csv(summary, tmp_path / "out" / "results.csv")

        df = pd.read_csv(path)

        assert len(df) == 2
        for result, (_, row) in zip(summary.results, df.iterrows()):
            for name, metric in result.scores.items():
                assert abs(row[f"{name}_score"] - metric.score) <= 1e-3

    def test_three_decimal_places(self, tmp_path):
        path = export_to_csv(_summary(), tmp_path / "results.csv")
        text = path.read_text(encoding="utf-8")
        assert "0.912" in text
        assert "0.91234" not in text

    def test_missing_metric_is_empty(self, tmp_path):
        path = export_to_csv(_summary(), tmp_path / "results.csv")
        df = pd.read_csv(path)
        assert pd.isna(df.loc[1, "context_precision_score"])
        assert pd.isna(df.loc[0, "faithfulness_score"])

    def test_reasoning_with_commas_survives(self, tmp_path):
        path = export_to_csv(_summary(), tmp_path / "results.csv")
        df = pd.read_csv(path)
        assert df.loc[0, "correctness_reasoning"] == "Correct, concise"
        assert df.loc[0, "generation"] == "Paris, of course."


class TestListEvaluations:
    def test_newest_first(self, tmp_path):
        save_summary(_summary("old", "2026-01-01T10:00:00"), tmp_path / "1_results.json")
        save_summary(_summary("new", "2026-02-01T10:00:00"), tmp_path / "2_results.json")

        evaluations = list_evaluations(tmp_path)

        assert [e["evaluation_id"] for e in evaluations] == ["new", "old"]
        assert evaluations[0]["metrics_summary"] == {"correctness": pytest.approx(0.95617)}
        assert evaluations[0]["completed_samples"] == 2

    def test_skips_unreadable_files(self, tmp_path):
        save_summary(_summary(), tmp_path / "ok.json")
        (tmp_path / "broken.json").write_text("{")
        (tmp_path / "other.json").write_text(json.dumps({"unrelated": True}))

        evaluations = list_evaluations(tmp_path)

        assert len(evaluations) == 1

    def test_missing_directory(self, tmp_path):
        assert list_evaluations(tmp_path / "nope") == []
