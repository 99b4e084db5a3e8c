"""
Corpus Parser — Reads Labelled Calibration Samples

Parses the simple text format used for feedback calibration files.
Each sample is a block of text preceded by metadata headers,
separated by '---' delimiters.

Format:
    ---
    expected: FALLACY
    subtype: strawman
    source: forum thread, topic 12
    notes: Classic "by that logic" reframing

    The actual response text goes here. It can span
    multiple lines.

    ---

`expected` is one of AFFIRMATION, INFLAMMATORY, FALLACY, UNSOURCED,
BIAS. `subtype` is optional.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reasonbridge.models import FeedbackType

_HEADER = re.compile(r"^(expected|subtype|source|notes)\s*:\s*(.+)$", re.IGNORECASE)


@dataclass
class CalibrationSample:
    """A single labelled sample from the calibration corpus."""
    text: str
    expected: FeedbackType
    subtype: Optional[str]
    source: str
    notes: str

    # Populated after engine evaluation
    engine_result: Optional[dict] = None

    @property
    def is_clean(self) -> bool:
        return self.expected == FeedbackType.AFFIRMATION


def parse_corpus(filepath: str | Path) -> list[CalibrationSample]:
    """
    Parse a calibration corpus file into a list of samples.

    Raises FileNotFoundError for a missing file and ValueError for an
    unknown `expected` label.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Corpus file not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    blocks = re.split(r"(?:^|\n)\s*---\s*(?:\n|$)", content)

    samples = []
    for block in blocks:
        block = block.strip()
        if not block or block.startswith("#"):
            continue

        sample = _parse_block(block)
        if sample:
            samples.append(sample)

    return samples


def _parse_block(block: str) -> Optional[CalibrationSample]:
    """Parse a single sample block."""
    metadata: dict[str, str] = {}
    text_lines: list[str] = []
    in_text = False

    for line in block.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#"):
            continue

        if not in_text:
            match = _HEADER.match(stripped)
            if match:
                metadata[match.group(1).lower()] = match.group(2).strip()
            elif stripped:
                in_text = True
                text_lines.append(line)
        else:
            text_lines.append(line)

    text = "\n".join(text_lines).strip()
    if not text:
        return None

    label = metadata.get("expected", "AFFIRMATION").upper()
    try:
        expected = FeedbackType(label)
    except ValueError:
        raise ValueError(f"Unknown expected label: {label!r}") from None

    subtype = metadata.get("subtype")
    return CalibrationSample(
        text=text,
        expected=expected,
        subtype=subtype.lower() if subtype else None,
        source=metadata.get("source", "unknown"),
        notes=metadata.get("notes", ""),
    )


def parse_all_corpora(corpus_dir: str | Path) -> list[CalibrationSample]:
    """Parse all .txt corpus files in a directory."""
    corpus_dir = Path(corpus_dir)
    samples = []
    for filepath in sorted(corpus_dir.glob("*.txt")):
        samples.extend(parse_corpus(filepath))
    return samples
