"""
Result Persistence

Writes evaluation summaries as pretty-printed JSON and flat CSV exports, and
reads them back for listing and comparison.
"""

import json
import logging
from pathlib import Path

import pandas as pd

from qa_judge.domain.constants import METRIC_NAMES
from qa_judge.domain.entities import EvaluationSummary
from qa_judge.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_DIR = Path("datasets") / "evaluation_results"


def save_summary(summary: EvaluationSummary, output_path: str | Path) -> Path:
    """
    Save the summary as pretty-printed JSON (parent directories are created)

    Returns:
        Path of the written file

    Raises:
        PersistenceError: If the file cannot be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, ensure_ascii=False, indent=2)
    except (OSError, TypeError) as e:
        raise PersistenceError(f"Failed to save results to {output_path}: {e}") from e
    logger.info("Results saved to %s", output_path)
    return output_path


def summary_to_dataframe(summary: EvaluationSummary) -> pd.DataFrame:
    """One row per result with a score/reasoning column pair per metric"""
    rows = []
    for result in summary.results:
        row = {
            "sample_id": result.sample_id,
            "query": result.query,
            "generation": result.generation,
            "ground_truth": result.ground_truth,
            "context": result.context or "",
        }
        for name in METRIC_NAMES:
            metric = result.scores.get(name)
            row[f"{name}_score"] = metric.score if metric is not None else None
            row[f"{name}_reasoning"] = metric.reasoning if metric is not None else ""
        row["timestamp"] = result.timestamp
        rows.append(row)

    columns = ["sample_id", "query", "generation", "ground_truth", "context"]
    for name in METRIC_NAMES:
        columns += [f"{name}_score", f"{name}_reasoning"]
    columns.append("timestamp")
    return pd.DataFrame(rows, columns=columns)


def export_to_csv(summary: EvaluationSummary, output_path: str | Path) -> Path:
    """
    Export per-sample results to CSV (scores with 3 decimal places)

    Raises:
        PersistenceError: If the file cannot be written
    """
    output_path = Path(output_path)
    df = summary_to_dataframe(summary)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False, float_format="%.3f", encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to export CSV to {output_path}: {e}") from e
    logger.info("CSV exported to %s", output_path)
    return output_path


def load_summary(path: str | Path) -> EvaluationSummary:
    """
    Load a summary written by save_summary

    Raises:
        PersistenceError: If the file cannot be read or is not a summary
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return EvaluationSummary.from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
        raise PersistenceError(f"Failed to load results from {path}: {e}") from e


def list_evaluations(results_dir: str | Path = DEFAULT_RESULTS_DIR) -> list[dict]:
    """
    Short descriptions of every saved evaluation, newest first

    Files that cannot be parsed are skipped with a warning.

    Returns:
        List of {evaluation_id, dataset_name, total_samples, completed_samples,
        started_at, completed_at, duration_seconds, metrics_summary}
    """
    results_dir = Path(results_dir)
    if not results_dir.is_dir():
        return []

    evaluations = []
    for file in sorted(results_dir.glob("*.json")):
        try:
            with open(file, encoding="utf-8") as f:
                data = json.load(f)
            evaluations.append({
                "evaluation_id": data["evaluation_id"],
                "dataset_name": data["dataset_name"],
                "total_samples": data["total_samples"],
                "completed_samples": data["completed_samples"],
                "started_at": data["started_at"],
                "completed_at": data.get("completed_at", ""),
                "duration_seconds": data.get("duration_seconds", 0.0),
                "metrics_summary": {
                    name: summary.get("average", 0.0)
                    for name, summary in data.get("metrics", {}).items()
                },
            })
        except (OSError, json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Skipping unreadable results file %s: %s", file, e)

    evaluations.sort(key=lambda e: e["started_at"], reverse=True)
    return evaluations
