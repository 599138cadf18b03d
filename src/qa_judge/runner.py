"""
qa-judge CLI Runner

Runs an LLM-as-judge evaluation over a dataset CSV.

Usage:
    python -m qa_judge.runner --dataset qa_dataset
    python -m qa_judge.runner --dataset qa_dataset --model claude-haiku-4-5-20251001 --max-samples 10
    python -m qa_judge.runner --dataset qa_dataset --metrics correctness,faithfulness --health-check
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from qa_judge.dataset_loader import DEFAULT_DATASETS_DIR, load_dataset, resolve_dataset_path
from qa_judge.domain.entities import EvaluationProgress
from qa_judge.domain.exceptions import ConfigError, DatasetLoadError, PersistenceError
from qa_judge.harness_config import load_config
from qa_judge.reporting import DEFAULT_RESULTS_DIR, export_to_csv
from qa_judge.use_cases.evaluation import Evaluator
from qa_judge.use_cases.health_check import run_judge_health_check

PROGRESS_BAR_WIDTH = 40

METRIC_LABELS = {
    "correctness": "Correctness",
    "context_precision": "Context Precision",
    "answer_relevance": "Answer Relevance",
    "faithfulness": "Faithfulness",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="qa-judge: Score generated answers with an LLM judge",
    )
    parser.add_argument(
        "--dataset",
        required=True,
        help="Dataset name (resolved to <datasets-dir>/<name>.csv) or path to a CSV file",
    )
    parser.add_argument(
        "--datasets-dir",
        default=DEFAULT_DATASETS_DIR,
        help=f"Directory containing dataset CSV files (default: {DEFAULT_DATASETS_DIR})",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Judge model name (default: JUDGE_MODEL from .env, then gemini-2.5-flash-lite)",
    )
    parser.add_argument(
        "--max-samples",
        type=int,
        default=None,
        help="Maximum number of samples to evaluate",
    )
    parser.add_argument(
        "--metrics",
        default=None,
        help="Comma-separated list of metrics (default: EVAL_METRICS from .env, then all metrics)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help=f"Path of the JSON results file (default: {DEFAULT_RESULTS_DIR}/<timestamp>_results.json)",
    )
    parser.add_argument(
        "--no-csv",
        action="store_true",
        help="Do not export a CSV next to the JSON results",
    )
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Check that the judge model responds before running",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def format_progress_bar(percentage: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render "[#####     ]" for a percentage in [0, 100]"""
    filled = round(percentage / 100 * width)
    filled = max(0, min(width, filled))
    return f"[{'#' * filled}{' ' * (width - filled)}]"


def print_progress(progress: EvaluationProgress) -> None:
    bar = format_progress_bar(progress.progress_percentage)
    sys.stdout.write(
        f"\r{bar} {progress.progress_percentage:5.1f}% | "
        f"Sample {progress.current_sample}/{progress.total_samples} | "
        f"{progress.current_metric:<18}"
    )
    sys.stdout.flush()


def default_output_path() -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return DEFAULT_RESULTS_DIR / f"{timestamp}_results.json"


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dataset_path = resolve_dataset_path(args.dataset, args.datasets_dir)
    output_path = Path(args.output) if args.output else default_output_path()
    metrics = [m.strip() for m in args.metrics.split(",") if m.strip()] if args.metrics else None

    try:
        config = load_config(
            str(dataset_path),
            model_name=args.model,
            max_samples=args.max_samples,
            output_path=str(output_path),
            metrics_to_run=metrics,
        )
    except ConfigError as e:
        print(f"ERROR: {e}")
        return 1

    print("\n=== qa-judge Evaluation ===\n")
    print(f"  Dataset: {dataset_path}")
    print(f"  Model:   {config.judge_config.model}")
    print(f"  Metrics: {', '.join(config.ordered_metrics())}")
    if config.max_samples:
        print(f"  Max samples: {config.max_samples}")
    print()

    if args.health_check:
        print("=== Judge Health Check ===\n")
        print(f"  {config.judge_config.model}... ", end="", flush=True)
        ok, err = run_judge_health_check(config.judge_config)
        if not ok:
            print("FAILED")
            print(f"  {err}")
            return 1
        print("OK\n")

    try:
        evaluator = Evaluator(config)
        dataset = load_dataset(dataset_path)
    except (ConfigError, DatasetLoadError) as e:
        print(f"ERROR: {e}")
        return 1

    evaluator.on_progress(print_progress)

    try:
        summary = evaluator.evaluate(dataset)
    except PersistenceError as e:
        print(f"\n\nERROR: {e}")
        return 1

    print("\n\n=== Evaluation Complete ===\n")
    print(f"  Evaluation ID: {summary.evaluation_id}")
    print(f"  Total samples: {summary.total_samples}")
    print(f"  Completed:     {summary.completed_samples}")
    print(f"  Failed:        {summary.failed_samples}")
    print(f"  Duration:      {summary.duration_seconds:.2f}s")
    print()

    print("=== Metric Averages ===\n")
    for name, metric in summary.metrics.items():
        label = METRIC_LABELS.get(name, name)
        print(f"  {label + ':':<19} {metric.average * 100:6.2f}%")
    print()

    print("=== Output ===\n")
    print(f"  Results: {output_path}")
    if not args.no_csv:
        csv_path = output_path.with_suffix(".csv")
        try:
            export_to_csv(summary, csv_path)
        except PersistenceError as e:
            print(f"\nERROR: {e}")
            return 1
        print(f"  CSV:     {csv_path}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
