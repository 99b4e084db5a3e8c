"""
Benchmark Runner — Precision/Recall/F1 per Feedback Type

Runs the calibration corpus through the feedback orchestrator and
compares the winning result against human labels. Produces:

  1. Per-type precision, recall, F1 (one-vs-rest)
  2. Overall accuracy of the winning type
  3. Subtype accuracy where a subtype was labelled
  4. Average confidence on right vs. wrong calls
  5. Every misclassification for manual review

This is the tool that tells you whether the pattern tables and the
tie-break rule still agree with people.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from calibration.corpus_parser import CalibrationSample, parse_all_corpora
from reasonbridge.feedback import FeedbackOrchestrator
from reasonbridge.models import FeedbackType


@dataclass
class TypeMetrics:
    """Precision/recall metrics for a single feedback type."""
    feedback_type: FeedbackType
    true_positives: int = 0   # Engine chose it, human labelled it
    false_positives: int = 0  # Engine chose it, human labelled something else
    false_negatives: int = 0  # Human labelled it, engine chose something else
    true_negatives: int = 0   # Neither

    @property
    def precision(self) -> float:
        denom = self.true_positives + self.false_positives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def recall(self) -> float:
        denom = self.true_positives + self.false_negatives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if (p + r) > 0 else 0.0

    @property
    def support(self) -> int:
        """Number of human-labelled samples of this type."""
        return self.true_positives + self.false_negatives


@dataclass
class BenchmarkResult:
    """Full benchmark output."""
    total_samples: int
    clean_samples: int
    flagged_samples: int
    type_metrics: dict[str, TypeMetrics]
    overall_accuracy: float
    macro_precision: float
    macro_recall: float
    macro_f1: float
    subtype_accuracy: Optional[float]      # None when no sample labels a subtype
    avg_confidence_correct: float
    avg_confidence_incorrect: float
    misclassifications: list[dict]


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def evaluate_samples(
    samples: list[CalibrationSample],
    orchestrator: Optional[FeedbackOrchestrator] = None,
) -> BenchmarkResult:
    """Score already-parsed samples. Stores each engine result on its sample."""
    orchestrator = orchestrator or FeedbackOrchestrator()

    metrics = {t.value: TypeMetrics(feedback_type=t) for t in FeedbackType}
    misclassifications = []
    correct_conf: list[float] = []
    wrong_conf: list[float] = []
    subtype_checked = subtype_hits = 0
    correct = 0

    for sample in samples:
        result = orchestrator.analyze_content_sync(sample.text)
        sample.engine_result = {
            "type": result.type.value,
            "subtype": result.subtype,
            "confidence": result.confidence_score,
        }

        hit = result.type == sample.expected
        if hit:
            correct += 1
            correct_conf.append(result.confidence_score)
            if sample.subtype:
                subtype_checked += 1
                subtype_hits += int(result.subtype == sample.subtype)
        else:
            wrong_conf.append(result.confidence_score)
            misclassifications.append({
                "expected": sample.expected.value,
                "predicted": result.type.value,
                "predicted_subtype": result.subtype,
                "confidence": result.confidence_score,
                "text": sample.text[:200],
                "source": sample.source,
                "notes": sample.notes,
            })

        for key, tm in metrics.items():
            engine_has = result.type.value == key
            human_has = sample.expected.value == key
            if engine_has and human_has:
                tm.true_positives += 1
            elif engine_has:
                tm.false_positives += 1
            elif human_has:
                tm.false_negatives += 1
            else:
                tm.true_negatives += 1

    active = [m for m in metrics.values() if m.support > 0]
    clean = sum(1 for s in samples if s.is_clean)

    return BenchmarkResult(
        total_samples=len(samples),
        clean_samples=clean,
        flagged_samples=len(samples) - clean,
        type_metrics=metrics,
        overall_accuracy=round(correct / len(samples), 4) if samples else 0.0,
        macro_precision=round(_mean([m.precision for m in active]), 4),
        macro_recall=round(_mean([m.recall for m in active]), 4),
        macro_f1=round(_mean([m.f1 for m in active]), 4),
        subtype_accuracy=(
            round(subtype_hits / subtype_checked, 4) if subtype_checked else None
        ),
        avg_confidence_correct=round(_mean(correct_conf), 4),
        avg_confidence_incorrect=round(_mean(wrong_conf), 4),
        misclassifications=misclassifications,
    )


def run_benchmark(
    corpus_dir: str | Path = "calibration/corpus",
    orchestrator: Optional[FeedbackOrchestrator] = None,
) -> BenchmarkResult:
    """Parse every corpus file in corpus_dir and score it."""
    samples = parse_all_corpora(corpus_dir)
    if not samples:
        raise ValueError(f"No samples found in {corpus_dir}")
    return evaluate_samples(samples, orchestrator)


def format_report(result: BenchmarkResult) -> str:
    """Format benchmark results as a human-readable report."""
    subtype = (
        f"{result.subtype_accuracy:.1%}" if result.subtype_accuracy is not None else "n/a"
    )
    lines = [
        "=" * 60,
        "REASONBRIDGE FEEDBACK CALIBRATION REPORT",
        "=" * 60,
        "",
        f"Samples: {result.total_samples} "
        f"({result.clean_samples} clean, {result.flagged_samples} flagged)",
        "",
        "--- OVERALL METRICS ---",
        f"Accuracy:        {result.overall_accuracy:.1%}",
        f"Macro precision: {result.macro_precision:.1%}",
        f"Macro recall:    {result.macro_recall:.1%}",
        f"Macro F1:        {result.macro_f1:.1%}",
        f"Subtype accuracy: {subtype}",
        "",
        "--- CONFIDENCE ---",
        f"Avg confidence (correct):   {result.avg_confidence_correct:.2f}",
        f"Avg confidence (incorrect): {result.avg_confidence_incorrect:.2f}",
        "",
        "--- PER-TYPE BREAKDOWN ---",
        f"{'Type':<14} {'Prec':>6} {'Recall':>6} {'F1':>6} {'TP':>4} {'FP':>4} {'FN':>4} {'Support':>7}",
        "-" * 60,
    ]

    for m in sorted(result.type_metrics.values(), key=lambda m: (-m.support, -m.f1)):
        if m.support > 0 or m.false_positives > 0:
            lines.append(
                f"{m.feedback_type.value:<14} {m.precision:>5.0%} {m.recall:>6.0%} "
                f"{m.f1:>5.0%} {m.true_positives:>4} {m.false_positives:>4} "
                f"{m.false_negatives:>4} {m.support:>7}"
            )

    if result.misclassifications:
        lines.extend(["", "--- MISCLASSIFICATIONS ---"])
        for miss in result.misclassifications[:10]:
            lines.append(
                f"  [{miss['expected']} -> {miss['predicted']}] {miss['text'][:80]}..."
            )
            if miss.get("notes"):
                lines.append(f"    Notes: {miss['notes']}")

    lines.extend(["", "=" * 60])
    return "\n".join(lines)


def report_json(result: BenchmarkResult) -> dict:
    return {
        "total_samples": result.total_samples,
        "clean_samples": result.clean_samples,
        "flagged_samples": result.flagged_samples,
        "overall": {
            "accuracy": result.overall_accuracy,
            "precision": result.macro_precision,
            "recall": result.macro_recall,
            "f1": result.macro_f1,
            "subtype_accuracy": result.subtype_accuracy,
        },
        "confidence": {
            "correct": result.avg_confidence_correct,
            "incorrect": result.avg_confidence_incorrect,
        },
        "per_type": {
            key: {
                "precision": m.precision,
                "recall": m.recall,
                "f1": m.f1,
                "tp": m.true_positives,
                "fp": m.false_positives,
                "fn": m.false_negatives,
                "support": m.support,
            }
            for key, m in result.type_metrics.items()
            if m.support > 0 or m.false_positives > 0
        },
        "misclassifications": result.misclassifications,
    }


def save_report(result: BenchmarkResult, output_dir: str | Path = "calibration/reports"):
    """Save benchmark results as both human-readable report and JSON."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / "calibration_report.txt"
    report_path.write_text(format_report(result), encoding="utf-8")

    json_path = output_dir / "calibration_report.json"
    json_path.write_text(json.dumps(report_json(result), indent=2), encoding="utf-8")

    return report_path, json_path
