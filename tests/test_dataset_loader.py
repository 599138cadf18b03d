"""
dataset_loader.pyのテスト
"""

import json
import logging
from pathlib import Path

import pandas as pd
import pytest

from qa_judge.dataset_loader import load_dataset, resolve_dataset_path
from qa_judge.domain.exceptions import DatasetLoadError


def _write_csv(path: Path, rows: list[dict]) -> Path:
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


class TestLoadDataset:
    def test_primary_column_names(self, tmp_path):
        path = _write_csv(tmp_path / "qa.csv", [
            {"input": "What is 2+2?", "generation": "4", "expected_output": "4"},
        ])

        dataset = load_dataset(path)

        assert dataset.name == "qa"
        sample = dataset.samples[0]
        assert sample.query == "What is 2+2?"
        assert sample.generation == "4"
        assert sample.ground_truth == "4"
        assert sample.context is None
        assert sample.metadata == {}
        assert dataset.metadata["source"] == str(path)
        assert "created_at" in dataset.metadata

    def test_column_aliases(self, tmp_path):
        path = _write_csv(tmp_path / "alias.csv", [
            {"question": "Q", "answer": "A", "expected": "E"},
        ])

        sample = load_dataset(path).samples[0]

        assert (sample.query, sample.generation, sample.ground_truth) == ("Q", "A", "E")

    def test_generated_ids_are_one_based(self, tmp_path):
        path = _write_csv(tmp_path / "ids.csv", [
            {"query": "a", "ground_truth": "x"},
            {"query": "b", "ground_truth": "y"},
        ])

        samples = load_dataset(path).samples

        assert [s.id for s in samples] == ["sample_1", "sample_2"]
        assert samples[0].generation == ""

    def test_explicit_id_column_kept_as_string(self, tmp_path):
        path = _write_csv(tmp_path / "ids.csv", [{"id": 7, "query": "a"}])
        assert load_dataset(path).samples[0].id == "7"

    def test_metadata_json_and_context(self, tmp_path):
        metadata = {"category": "HR", "source": "handbook.pdf", "context": "Employees get 20 days."}
        path = _write_csv(tmp_path / "meta.csv", [
            {"query": "How many days?", "metadata": json.dumps(metadata)},
        ])

        sample = load_dataset(path).samples[0]

        assert sample.metadata["category"] == "HR"
        assert sample.context == "Employees get 20 days."

    def test_context_column_takes_precedence(self, tmp_path):
        path = _write_csv(tmp_path / "ctx.csv", [
            {"query": "q", "context": "column context", "metadata": json.dumps({"context": "meta context"})},
        ])
        assert load_dataset(path).samples[0].context == "column context"

    def test_malformed_metadata_logs_warning(self, tmp_path, caplog):
        path = _write_csv(tmp_path / "bad.csv", [{"query": "q", "metadata": "{not json"}])

        with caplog.at_level(logging.WARNING, logger="qa_judge.dataset_loader"):
            sample = load_dataset(path).samples[0]

        assert sample.metadata == {}
        assert "Failed to parse metadata for row 0" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetLoadError, match="not found"):
            load_dataset(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DatasetLoadError):
            load_dataset(path)

    def test_no_question_column(self, tmp_path):
        path = _write_csv(tmp_path / "noq.csv", [{"answer": "a", "expected": "e"}])
        with pytest.raises(DatasetLoadError, match="no question column"):
            load_dataset(path)


class TestResolveDatasetPath:
    def test_name_resolves_into_datasets_dir(self, tmp_path):
        assert resolve_dataset_path("qa", tmp_path) == tmp_path / "qa.csv"

    def test_default_directory(self):
        assert resolve_dataset_path("qa") == Path("datasets") / "qa.csv"

    def test_existing_csv_path_returned_as_is(self, tmp_path):
        path = _write_csv(tmp_path / "direct.csv", [{"query": "q"}])
        assert resolve_dataset_path(str(path), "elsewhere") == path
