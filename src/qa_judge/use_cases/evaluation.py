"""
Evaluation Execution

Drives the per-sample x per-metric loop, tracks progress, isolates per-sample
failures, and assembles (and optionally persists) the evaluation summary.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable

from qa_judge.dataset_loader import load_dataset
from qa_judge.domain.entities import (
    Dataset,
    EvaluationProgress,
    EvaluationResult,
    EvaluationSummary,
    Sample,
)
from qa_judge.domain.exceptions import EvaluationCancelled
from qa_judge.harness_config import EvaluationConfig
from qa_judge.prompts.templates import TemplateRegistry
from qa_judge.reporting import export_to_csv, save_summary
from qa_judge.scoring.judge import JudgeClient
from qa_judge.scoring.metrics import score_metric
from qa_judge.use_cases.statistics import summarize_results

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[EvaluationProgress], None]


class Evaluator:
    """
    Runs one evaluation over a dataset

    Samples are evaluated sequentially and metrics in the fixed order
    correctness -> context_precision -> answer_relevance -> faithfulness.
    A sample whose evaluation raises is dropped (no partial result) and counted
    as failed; the run continues with the next sample.
    """

    def __init__(
        self,
        config: EvaluationConfig,
        judge: JudgeClient | None = None,
        registry: TemplateRegistry | None = None,
    ):
        """
        Args:
            config: Evaluation configuration (validated here)
            judge: Judge client (built from config.judge_config if not given)
            registry: Prompt templates (TemplateRegistry.default() if not given)

        Raises:
            ConfigError: If the configuration is invalid or the judge model
                cannot be configured
        """
        config.validate()
        self.config = config
        self.registry = registry if registry is not None else TemplateRegistry.default()
        self._cancel_event = threading.Event()

        if judge is None:
            judge = JudgeClient.from_config(config.judge_config, cancel_event=self._cancel_event)
        elif isinstance(judge, JudgeClient) and judge.cancel_event is None:
            # Injected judges may be shared; never write this evaluator's event into them
            judge = judge.with_cancel_event(self._cancel_event)
        self.judge = judge

        self._progress = EvaluationProgress()
        self._results: list[EvaluationResult] = []
        self._progress_callback: ProgressCallback | None = None
        self.last_summary: EvaluationSummary | None = None

    def on_progress(self, callback: ProgressCallback) -> None:
        """Register the observer called with a progress snapshot after every metric and sample"""
        self._progress_callback = callback

    def _notify(self) -> None:
        if self._progress_callback is not None:
            self._progress_callback(replace(self._progress))

    def get_progress(self) -> EvaluationProgress:
        return replace(self._progress)

    def get_results(self) -> list[EvaluationResult]:
        return list(self._results)

    def cancel(self) -> None:
        """
        Request cancellation

        Checked before every sample and during judge retry waits. Samples not
        evaluated count as failed and the final status is "failed". Applies to
        the run in progress; the next evaluate() starts uncancelled.
        """
        logger.info("Cancellation requested")
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def evaluate(self, dataset: Dataset | None = None) -> EvaluationSummary:
        """
        Evaluate every sample of the dataset

        Args:
            dataset: Dataset to evaluate (loaded from config.dataset_path if not given)

        Returns:
            EvaluationSummary

        Raises:
            DatasetLoadError: If the dataset cannot be loaded
            PersistenceError: If saving fails (after the summary has been computed;
                it remains available as ``last_summary``)
        """
        self._cancel_event.clear()
        start_time = time.time()
        started_at = datetime.now().isoformat()

        if dataset is None:
            dataset = load_dataset(self.config.dataset_path)

        samples = dataset.samples
        if self.config.max_samples:
            samples = samples[:self.config.max_samples]
        metrics = self.config.ordered_metrics()
        total = len(samples)

        self._results = []
        self._progress = EvaluationProgress(total_samples=total, status="running")
        self._notify()

        logger.info(
            "Evaluating %d samples from '%s' with %s (metrics: %s)",
            total, dataset.name, getattr(self.judge, "model_name", "judge"), metrics,
        )

        for i, sample in enumerate(samples):
            if self.cancelled:
                logger.warning("Evaluation cancelled; %d samples not evaluated", total - i)
                break

            try:
                self._results.append(self._evaluate_sample(sample, metrics))
            except EvaluationCancelled:
                self._cancel_event.set()
                logger.warning(
                    "Evaluation cancelled during sample %s; %d samples not evaluated",
                    sample.id, total - i,
                )
                break
            except Exception as e:
                logger.error(
                    "Failed to evaluate sample %s (metric: %s): %s",
                    sample.id, self._progress.current_metric, e,
                )

            self._progress.current_sample = i + 1
            self._progress.progress_percentage = (i + 1) / total * 100
            self._notify()

        self._progress.status = "failed" if self.cancelled else "completed"
        self._notify()

        end_time = time.time()
        summary = EvaluationSummary(
            evaluation_id=uuid.uuid4().hex,
            dataset_name=dataset.name,
            total_samples=total,
            completed_samples=len(self._results),
            failed_samples=total - len(self._results),
            started_at=started_at,
            completed_at=datetime.now().isoformat(),
            duration_seconds=end_time - start_time,
            metrics=summarize_results(self._results, metrics),
            results=list(self._results),
        )
        self.last_summary = summary

        logger.info(
            "Evaluation %s finished: %d completed, %d failed in %.2fs",
            summary.evaluation_id, summary.completed_samples, summary.failed_samples,
            summary.duration_seconds,
        )

        if self.config.save_results and self.config.output_path:
            save_summary(summary, self.config.output_path)

        return summary

    def _evaluate_sample(self, sample: Sample, metrics: list[str]) -> EvaluationResult:
        """Evaluate all requested metrics for one sample (raises on the first failure)"""
        scores = {}
        for metric_name in metrics:
            self._progress.current_metric = metric_name
            self._notify()
            scores[metric_name] = score_metric(metric_name, sample, self.judge, self.registry)

        return EvaluationResult(
            sample_id=sample.id,
            query=sample.query,
            generation=sample.generation,
            ground_truth=sample.ground_truth,
            scores=scores,
            timestamp=datetime.now().isoformat(),
            context=sample.context,
        )

    def export_to_csv(self, summary: EvaluationSummary, output_path: str | Path) -> Path:
        """Export per-sample results of a summary to CSV"""
        return export_to_csv(summary, output_path)


def run_evaluation(
    config: EvaluationConfig,
    judge: JudgeClient | None = None,
    on_progress: ProgressCallback | None = None,
) -> EvaluationSummary:
    """
    Build an Evaluator for the config and run it

    Args:
        config: Evaluation configuration
        judge: Judge client (optional)
        on_progress: Progress observer (optional)

    Returns:
        EvaluationSummary
    """
    evaluator = Evaluator(config, judge=judge)
    if on_progress is not None:
        evaluator.on_progress(on_progress)
    return evaluator.evaluate()
