"""
Tests for the calibration framework.

Tests cover:
  - Corpus parser (format parsing, edge cases)
  - Benchmark runner (metric calculation, report generation)
  - Seed corpus baseline (the shipped tables agree with the labels)
"""

import json
import textwrap
from pathlib import Path

import pytest

from calibration.benchmark import (
    TypeMetrics,
    evaluate_samples,
    format_report,
    run_benchmark,
    save_report,
)
from calibration.corpus_parser import (
    CalibrationSample,
    _parse_block,
    parse_all_corpora,
    parse_corpus,
)
from reasonbridge.models import FeedbackType

# Absolute path to the seed corpus (works regardless of CWD)
REPO_ROOT = Path(__file__).resolve().parent.parent
SEED_CORPUS = REPO_ROOT / "calibration" / "corpus"


# ============================================================
# Corpus Parser Tests
# ============================================================

class TestCorpusParser:

    def test_parse_single_sample(self, tmp_path):
        corpus = tmp_path / "test.txt"
        corpus.write_text(textwrap.dedent("""\
            ---
            expected: FALLACY
            subtype: strawman
            source: test thread
            notes: test note

            By that logic, nobody should ever drive.

            ---
        """))
        samples = parse_corpus(corpus)
        assert len(samples) == 1
        s = samples[0]
        assert s.expected == FeedbackType.FALLACY
        assert s.subtype == "strawman"
        assert s.source == "test thread"
        assert s.notes == "test note"
        assert "By that logic" in s.text
        assert not s.is_clean

    def test_default_values(self, tmp_path):
        corpus = tmp_path / "test.txt"
        corpus.write_text("---\nJust a plain reply.\n---\n")
        s = parse_corpus(corpus)[0]
        assert s.expected == FeedbackType.AFFIRMATION
        assert s.subtype is None
        assert s.source == "unknown"
        assert s.is_clean

    def test_labels_case_insensitive(self):
        s = _parse_block("Expected: bias\nSubtype: Loaded_Language\n\nSome text.")
        assert s.expected == FeedbackType.BIAS
        assert s.subtype == "loaded_language"

    def test_unknown_label_raises(self):
        with pytest.raises(ValueError):
            _parse_block("expected: RUDE\n\nSome text.")

    def test_multiple_samples(self, tmp_path):
        corpus = tmp_path / "test.txt"
        corpus.write_text(textwrap.dedent("""\
            ---
            expected: INFLAMMATORY

            Shut up.

            ---
            expected: AFFIRMATION

            Thanks for explaining.

            ---
        """))
        samples = parse_corpus(corpus)
        assert [s.expected for s in samples] == [FeedbackType.INFLAMMATORY, FeedbackType.AFFIRMATION]

    def test_skip_comments(self, tmp_path):
        corpus = tmp_path / "test.txt"
        corpus.write_text(textwrap.dedent("""\
            # header comment
            ---
            expected: AFFIRMATION
            # inline comment

            A reply.

            ---
        """))
        samples = parse_corpus(corpus)
        assert len(samples) == 1
        assert samples[0].text == "A reply."

    def test_multiline_text(self, tmp_path):
        corpus = tmp_path / "test.txt"
        corpus.write_text("---\nexpected: AFFIRMATION\n\nLine one.\nLine two.\n---\n")
        assert parse_corpus(corpus)[0].text == "Line one.\nLine two."

    def test_empty_file(self, tmp_path):
        corpus = tmp_path / "empty.txt"
        corpus.write_text("")
        assert parse_corpus(corpus) == []

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            parse_corpus("/nonexistent/corpus.txt")

    def test_parse_all_corpora(self, tmp_path):
        (tmp_path / "a.txt").write_text("---\nexpected: BIAS\n\nOne.\n---\n")
        (tmp_path / "b.txt").write_text("---\nexpected: UNSOURCED\n\nTwo.\n---\n")
        (tmp_path / "ignored.md").write_text("---\nThree.\n---\n")
        samples = parse_all_corpora(tmp_path)
        assert [s.text for s in samples] == ["One.", "Two."]


# ============================================================
# Benchmark Tests
# ============================================================

class TestBenchmark:

    def test_type_metrics_math(self):
        m = TypeMetrics(FeedbackType.FALLACY, true_positives=8, false_positives=2, false_negatives=2)
        assert m.precision == pytest.approx(0.8)
        assert m.recall == pytest.approx(0.8)
        assert m.f1 == pytest.approx(0.8)
        assert m.support == 10

    def test_type_metrics_zero(self):
        m = TypeMetrics(FeedbackType.BIAS)
        assert m.precision == 0.0
        assert m.recall == 0.0
        assert m.f1 == 0.0

    def test_misclassification_recorded(self):
        samples = [
            CalibrationSample(text="Shut up.", expected=FeedbackType.FALLACY, subtype=None,
                              source="test", notes="deliberately wrong"),
        ]
        result = evaluate_samples(samples)
        assert result.overall_accuracy == 0.0
        assert result.misclassifications[0]["predicted"] == "INFLAMMATORY"
        assert result.type_metrics["INFLAMMATORY"].false_positives == 1
        assert result.type_metrics["FALLACY"].false_negatives == 1
        assert samples[0].engine_result["type"] == "INFLAMMATORY"

    def test_subtype_accuracy(self):
        samples = [
            CalibrationSample(text="By that logic, nobody drives.", expected=FeedbackType.FALLACY,
                              subtype="strawman", source="test", notes=""),
            CalibrationSample(text="Think of the children.", expected=FeedbackType.FALLACY,
                              subtype="strawman", source="test", notes=""),
        ]
        result = evaluate_samples(samples)
        assert result.overall_accuracy == 1.0
        assert result.subtype_accuracy == 0.5

    def test_report_format(self):
        report = format_report(run_benchmark(SEED_CORPUS))
        assert "REASONBRIDGE FEEDBACK CALIBRATION REPORT" in report
        assert "PER-TYPE BREAKDOWN" in report

    def test_save_report(self, tmp_path):
        report_path, json_path = save_report(run_benchmark(SEED_CORPUS), tmp_path)
        assert report_path.exists()
        data = json.loads(json_path.read_text())
        assert data["total_samples"] > 0
        assert "per_type" in data

    def test_empty_corpus_raises(self, tmp_path):
        with pytest.raises(ValueError):
            run_benchmark(tmp_path)


# ============================================================
# Seed Corpus Baseline
# ============================================================

class TestSeedCorpus:

    @pytest.fixture(scope="class")
    def result(self):
        return run_benchmark(SEED_CORPUS)

    def test_every_type_represented(self, result):
        for t in FeedbackType:
            assert result.type_metrics[t.value].support > 0

    def test_full_accuracy(self, result):
        assert result.misclassifications == []
        assert result.overall_accuracy == 1.0

    def test_subtypes_match(self, result):
        assert result.subtype_accuracy == 1.0

    def test_clean_samples_never_flagged(self, result):
        assert result.type_metrics["AFFIRMATION"].recall == 1.0
