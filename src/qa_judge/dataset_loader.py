"""
Dataset Loader

Loads evaluation samples from CSV files.
Supports several column-name conventions for the question, answer and reference.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from qa_judge.domain.entities import Dataset, Sample
from qa_judge.domain.exceptions import DatasetLoadError

logger = logging.getLogger(__name__)

DEFAULT_DATASETS_DIR = "datasets"

# Accepted column names, in priority order
QUERY_COLUMNS = ("input", "query", "question")
GENERATION_COLUMNS = ("generation", "output", "answer")
GROUND_TRUTH_COLUMNS = ("expected_output", "ground_truth", "expected")


def _first_value(row: dict, columns: tuple[str, ...]) -> str:
    """First non-empty value among the given columns ("" if none)"""
    for col in columns:
        value = row.get(col, "")
        if value:
            return value
    return ""


def _parse_metadata(raw: str, row_index: int) -> dict:
    """
    Decode the JSON metadata column

    Malformed JSON (or a non-object value) is logged and treated as empty metadata.
    """
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse metadata for row %d: %s", row_index, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Metadata for row %d is not a JSON object; ignoring it", row_index)
        return {}
    return data


def _row_to_sample(row: dict, index: int) -> Sample:
    metadata = _parse_metadata(row.get("metadata", ""), index)
    context = row.get("context") or metadata.get("context") or None
    return Sample(
        id=row.get("id") or f"sample_{index + 1}",
        query=_first_value(row, QUERY_COLUMNS),
        generation=_first_value(row, GENERATION_COLUMNS),
        ground_truth=_first_value(row, GROUND_TRUTH_COLUMNS),
        context=str(context) if context is not None else None,
        metadata=metadata,
    )


def load_dataset(path: str | Path) -> Dataset:
    """
    Load a dataset from a CSV file

    Args:
        path: Path to the CSV file

    Returns:
        Dataset: named after the file stem, with one Sample per row

    Raises:
        DatasetLoadError: If the file cannot be read or has no question column
    """
    path = Path(path)
    if not path.is_file():
        raise DatasetLoadError(f"Dataset file not found: {path}")

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetLoadError(f"Failed to parse CSV {path}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    if not any(col in df.columns for col in QUERY_COLUMNS):
        raise DatasetLoadError(
            f"Dataset {path} has no question column (expected one of {list(QUERY_COLUMNS)})"
        )

    samples = [
        _row_to_sample(row, index)
        for index, row in enumerate(df.to_dict(orient="records"))
    ]
    logger.info("Loaded %d samples from %s", len(samples), path)

    return Dataset(
        name=path.stem,
        samples=samples,
        metadata={
            "created_at": datetime.now().isoformat(),
            "source": str(path),
        },
    )


def resolve_dataset_path(name: str, datasets_dir: str | Path = DEFAULT_DATASETS_DIR) -> Path:
    """
    Resolve a dataset name to ``<datasets_dir>/<name>.csv``

    A name that already points to an existing file is returned unchanged.
    """
    candidate = Path(name)
    if candidate.suffix == ".csv" and candidate.is_file():
        return candidate
    return Path(datasets_dir) / f"{name}.csv"
