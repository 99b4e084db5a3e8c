"""
Input-shape validation for proposition and alignment records.

Malformed records reject the whole call with InvalidInputError.
Silently skipping a bad record would break the clustering coverage
count, so nothing here drops data.

Both dataclass instances and plain mappings (decoded JSON) are
accepted and normalized to the frozen records in reasonbridge.models.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Sequence, Union

from reasonbridge.exceptions import InvalidInputError
from reasonbridge.models import (
    PropositionAlignment,
    PropositionInput,
    Stance,
    StanceAlignment,
)

PropositionLike = Union[PropositionInput, Mapping]
AlignmentLike = Union[PropositionAlignment, Mapping]


def _field(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _require_id(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{where}: id must be a non-empty string")
    return value


def _require_count(value: Any, name: str, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"{where}: {name} must be a non-negative integer")
    return value


def _require_sequence(value: Any, name: str) -> Sequence:
    if not isinstance(value, (list, tuple)):
        raise InvalidInputError(f"{name} must be a list")
    return value


def validate_propositions(items: Sequence[PropositionLike]) -> tuple[PropositionInput, ...]:
    """Normalize clustering input. Ids must be unique non-blank strings."""
    items = _require_sequence(items, "propositions")
    seen: set[str] = set()
    out: list[PropositionInput] = []
    for i, raw in enumerate(items):
        where = f"proposition[{i}]"
        if not isinstance(raw, (PropositionInput, Mapping)):
            raise InvalidInputError(f"{where}: expected a proposition record")

        pid = _require_id(_field(raw, "id"), where)
        statement = _field(raw, "statement")
        if not isinstance(statement, str):
            raise InvalidInputError(f"{where}: statement must be a string")
        metadata = _field(raw, "metadata")
        if metadata is not None and not isinstance(metadata, Mapping):
            raise InvalidInputError(f"{where}: metadata must be a mapping")
        if pid in seen:
            raise InvalidInputError(f"{where}: duplicate id {pid!r}")

        seen.add(pid)
        out.append(PropositionInput(
            id=pid,
            statement=statement,
            metadata=dict(metadata) if metadata is not None else None,
        ))
    return tuple(out)


def _stance(raw: Any, where: str) -> StanceAlignment:
    if not isinstance(raw, (StanceAlignment, Mapping)):
        raise InvalidInputError(f"{where}: expected an alignment record")

    user_id = _field(raw, "user_id")
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidInputError(f"{where}: user_id must be a non-empty string")

    try:
        stance = Stance(_field(raw, "stance"))
    except ValueError:
        raise InvalidInputError(
            f"{where}: stance must be one of SUPPORT, OPPOSE, NUANCED"
        ) from None

    note = _field(raw, "nuance_explanation")
    if note is not None and not isinstance(note, str):
        raise InvalidInputError(f"{where}: nuance_explanation must be a string")

    return StanceAlignment(user_id=user_id, stance=stance, nuance_explanation=note)


def validate_alignments(items: Sequence[AlignmentLike]) -> tuple[PropositionAlignment, ...]:
    """Normalize synthesis / divergence input."""
    items = _require_sequence(items, "propositions")
    out: list[PropositionAlignment] = []
    for i, raw in enumerate(items):
        where = f"proposition[{i}]"
        if not isinstance(raw, (PropositionAlignment, Mapping)):
            raise InvalidInputError(f"{where}: expected a proposition alignment record")

        pid = _require_id(_field(raw, "id"), where)
        statement = _field(raw, "statement")
        if not isinstance(statement, str):
            raise InvalidInputError(f"{where}: statement must be a string")

        support = _require_count(_field(raw, "support_count"), "support_count", where)
        oppose = _require_count(_field(raw, "oppose_count"), "oppose_count", where)
        nuanced = _require_count(_field(raw, "nuanced_count"), "nuanced_count", where)

        consensus = _field(raw, "consensus_score")
        if consensus is not None:
            if isinstance(consensus, bool) or not isinstance(consensus, (int, float)):
                raise InvalidInputError(f"{where}: consensus_score must be a number")
            if not 0.0 <= consensus <= 1.0:
                raise InvalidInputError(f"{where}: consensus_score must be within [0, 1]")
            consensus = float(consensus)

        alignments = _require_sequence(
            _field(raw, "alignments", ()) or (), f"{where}.alignments"
        )
        out.append(PropositionAlignment(
            id=pid,
            statement=statement,
            support_count=support,
            oppose_count=oppose,
            nuanced_count=nuanced,
            consensus_score=consensus,
            alignments=tuple(
                _stance(a, f"{where}.alignments[{j}]") for j, a in enumerate(alignments)
            ),
        ))
    return tuple(out)
