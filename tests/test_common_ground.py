"""
Tests for stance synthesis: common ground, divergence, input validation.

Fixtures are plain dicts shaped like decoded JSON, the same form the
API hands to the engine.
"""

import pytest

from reasonbridge.common_ground import (
    CONTEXT_LABEL,
    OPPOSE_FALLBACK,
    OPPOSE_LABEL,
    SUPPORT_FALLBACK,
    SUPPORT_LABEL,
    UNDERLYING_VALUES_PLACEHOLDER,
    CommonGroundSynthesizer,
)
from reasonbridge.divergence import DivergencePointDetector
from reasonbridge.exceptions import InvalidInputError
from reasonbridge.models import (
    PropositionAlignment,
    Stance,
    StanceAlignment,
    TopicData,
)
from reasonbridge.validation import validate_alignments


def prop(pid, support, oppose, nuanced, statement=None, consensus=None, alignments=()):
    return {
        "id": pid,
        "statement": statement or f"Proposition {pid}",
        "support_count": support,
        "oppose_count": oppose,
        "nuanced_count": nuanced,
        "consensus_score": consensus,
        "alignments": list(alignments),
    }


def stance(user, kind, note=None):
    return {"user_id": user, "stance": kind, "nuance_explanation": note}


def topic(*props, participant_count=None):
    return TopicData(topic_id="topic-1", propositions=props, participant_count=participant_count)


@pytest.fixture
def synth():
    return CommonGroundSynthesizer(min_participation=3)


@pytest.fixture
def detector():
    return DivergencePointDetector(min_participation=3)


# ============================================================
# AGREEMENT ZONES
# ============================================================

class TestAgreementZones:

    def test_strong_support(self, synth):
        result = synth.synthesize(topic(prop("a", 8, 1, 1)))
        assert len(result.agreement_zones) == 1
        zone = result.agreement_zones[0]
        assert zone.agreement_percentage == 80
        assert zone.participant_count == 8
        assert zone.proposition == "Proposition a"

    def test_seventy_percent_is_enough(self, synth):
        result = synth.synthesize(topic(prop("a", 7, 3, 0)))
        assert result.agreement_zones[0].agreement_percentage == 70

    def test_below_threshold(self, synth):
        result = synth.synthesize(topic(prop("a", 6, 4, 0)))
        assert result.agreement_zones == ()

    def test_sorted_by_percentage(self, synth):
        result = synth.synthesize(topic(
            prop("low", 7, 3, 0), prop("high", 9, 1, 0), prop("mid", 8, 2, 0),
        ))
        assert [z.agreement_percentage for z in result.agreement_zones] == [90, 80, 70]

    def test_equal_percentages_keep_input_order(self, synth):
        result = synth.synthesize(topic(prop("first", 8, 2, 0), prop("second", 4, 1, 0)))
        assert [z.proposition for z in result.agreement_zones] == [
            "Proposition first", "Proposition second",
        ]

    def test_evidence_from_support_and_nuance(self, synth):
        result = synth.synthesize(topic(prop("a", 4, 0, 1, alignments=[
            stance("u1", "SUPPORT", "Lower bills for families"),
            stance("u2", "SUPPORT"),
            stance("u3", "NUANCED", "Good if phased in"),
            stance("u4", "SUPPORT", "   "),
            stance("u5", "SUPPORT", "Cleaner air"),
            stance("u6", "SUPPORT", "Local jobs"),
        ])))
        assert result.agreement_zones[0].supporting_evidence == (
            "Lower bills for families", "Good if phased in", "Cleaner air",
        )

    def test_static_percentage_helper(self):
        assert CommonGroundSynthesizer.calculate_agreement_percentage(8, 1, 1) == 80
        assert CommonGroundSynthesizer.calculate_agreement_percentage(0, 0, 0) is None


# ============================================================
# MISUNDERSTANDINGS
# ============================================================

class TestMisunderstandings:

    def test_split_interpretations(self, synth):
        result = synth.synthesize(topic(prop("a", 2, 1, 3, alignments=[
            stance("u1", "NUANCED", "I support it if it is funded"),
            stance("u2", "NUANCED", "I oppose the current wording"),
            stance("u3", "NUANCED", "Depends on the region"),
        ])))
        assert len(result.misunderstandings) == 1
        found = result.misunderstandings[0]
        labels = {i.interpretation: i.participant_count for i in found.interpretations}
        assert labels == {SUPPORT_LABEL: 1, OPPOSE_LABEL: 1, CONTEXT_LABEL: 1}
        assert "3 nuanced responses" in found.clarification

    def test_note_leaning_both_ways_counts_twice(self, synth):
        result = synth.synthesize(topic(prop("a", 1, 1, 2, alignments=[
            stance("u1", "NUANCED", "I agree with the goal but disagree with the method"),
        ])))
        labels = {i.interpretation: i.participant_count for i in result.misunderstandings[0].interpretations}
        assert labels == {SUPPORT_LABEL: 1, OPPOSE_LABEL: 1}

    def test_single_interpretation_is_not_a_misunderstanding(self, synth):
        result = synth.synthesize(topic(prop("a", 2, 1, 3, alignments=[
            stance("u1", "NUANCED", "Depends on cost"),
            stance("u2", "NUANCED", "Depends on timing"),
        ])))
        assert result.misunderstandings == ()

    def test_only_nuanced_notes_counted(self, synth):
        result = synth.synthesize(topic(prop("a", 2, 1, 3, alignments=[
            stance("u1", "SUPPORT", "I support it fully"),
            stance("u2", "NUANCED", "Depends on the region"),
        ])))
        assert result.misunderstandings == ()

    def test_low_nuance_skipped(self, synth):
        result = synth.synthesize(topic(prop("a", 5, 4, 1, alignments=[
            stance("u1", "NUANCED", "I support part of it and oppose the rest"),
        ])))
        assert result.misunderstandings == ()


# ============================================================
# GENUINE DISAGREEMENTS
# ============================================================

class TestGenuineDisagreements:

    def test_even_split(self, synth):
        result = synth.synthesize(topic(prop("a", 5, 5, 0)))
        assert len(result.genuine_disagreements) == 1
        found = result.genuine_disagreements[0]
        support, oppose = found.viewpoints
        assert (support.position, support.participant_count) == ("Support", 5)
        assert (oppose.position, oppose.participant_count) == ("Oppose", 5)
        assert support.reasoning == (SUPPORT_FALLBACK,)
        assert oppose.reasoning == (OPPOSE_FALLBACK,)
        assert found.underlying_values == UNDERLYING_VALUES_PLACEHOLDER

    def test_reasons_from_alignments(self, synth):
        result = synth.synthesize(topic(prop("a", 3, 3, 0, alignments=[
            stance("u1", "SUPPORT", "Saves money"),
            stance("u2", "SUPPORT", "Faster service"),
            stance("u3", "SUPPORT", "Third reason dropped"),
            stance("u4", "OPPOSE", "Fewer jobs"),
        ])))
        support, oppose = result.genuine_disagreements[0].viewpoints
        assert support.reasoning == ("Saves money", "Faster service")
        assert oppose.reasoning == ("Fewer jobs",)

    def test_agreement_zone_is_never_a_disagreement(self, synth):
        result = synth.synthesize(topic(prop("a", 6, 2, 0)))
        assert len(result.agreement_zones) == 1
        assert result.genuine_disagreements == ()

    def test_high_nuance_is_not_disagreement(self, synth):
        result = synth.synthesize(topic(prop("a", 3, 3, 4)))
        assert result.genuine_disagreements == ()

    def test_lopsided_is_not_disagreement(self, synth):
        result = synth.synthesize(topic(prop("a", 2, 8, 0)))
        assert result.genuine_disagreements == ()


# ============================================================
# CONSENSUS / PARTICIPATION
# ============================================================

class TestConsensus:

    def test_given_scores_averaged(self, synth):
        result = synth.synthesize(topic(
            prop("a", 5, 0, 0, consensus=0.9), prop("b", 3, 2, 0, consensus=0.6),
        ))
        assert result.overall_consensus_score == 0.75

    def test_derived_when_missing(self, synth):
        result = synth.synthesize(topic(prop("a", 10, 0, 0), prop("b", 0, 10, 0)))
        assert result.overall_consensus_score == 0.5

    def test_below_min_participation_ignored(self, synth):
        result = synth.synthesize(topic(prop("a", 2, 0, 0)))
        assert result.agreement_zones == ()
        assert result.overall_consensus_score is None

    def test_empty_topic(self, synth):
        result = synth.synthesize(topic())
        assert result.agreement_zones == ()
        assert result.misunderstandings == ()
        assert result.genuine_disagreements == ()
        assert result.overall_consensus_score is None

    def test_zero_counts_with_no_minimum(self):
        result = CommonGroundSynthesizer(min_participation=0).synthesize(topic(prop("a", 0, 0, 0)))
        assert result.overall_consensus_score is None

    def test_accepts_dataclasses(self, synth):
        record = PropositionAlignment(
            id="a", statement="Build the bridge",
            support_count=8, oppose_count=1, nuanced_count=1,
            alignments=(StanceAlignment(user_id="u1", stance=Stance.SUPPORT,
                                        nuance_explanation="Shorter commute"),),
        )
        result = synth.synthesize(topic(record))
        assert result.agreement_zones[0].supporting_evidence == ("Shorter commute",)

    def test_input_untouched(self, synth):
        record = prop("a", 8, 1, 1, alignments=[stance("u1", "SUPPORT", "Yes")])
        before = repr(record)
        synth.synthesize(topic(record))
        assert repr(record) == before


# ============================================================
# DIVERGENCE
# ============================================================

class TestDivergence:

    def test_even_split_is_highly_polarized(self, detector):
        result = detector.identify_divergence_points("t1", [prop("a", 5, 5, 0, alignments=[
            stance("u1", "SUPPORT", "Saves money"),
            stance("u2", "OPPOSE", "Fewer jobs"),
        ])])
        assert len(result.divergence_points) == 1
        point = result.divergence_points[0]
        assert point.polarization_score > 0.9
        assert point.total_participants == 10
        assert [v.percentage for v in point.viewpoints] == [50, 50]
        assert point.viewpoints[0].reasoning == ("Saves money",)
        assert result.overall_polarization == pytest.approx(1.0)
        assert result.participant_count == 2

    def test_ninety_ten_is_consensus(self, detector):
        result = detector.identify_divergence_points("t1", [prop("a", 9, 1, 0)])
        assert result.divergence_points == ()
        assert result.overall_polarization == 0.0

    def test_nuance_heavy_is_not_divergence(self, detector):
        result = detector.identify_divergence_points("t1", [prop("a", 4, 4, 4)])
        assert result.divergence_points == ()

    def test_below_min_participation(self, detector):
        result = detector.identify_divergence_points("t1", [prop("a", 1, 1, 0)])
        assert result.divergence_points == ()

    def test_percentages_sum_to_100(self, detector):
        point = detector.identify_divergence_points("t1", [prop("a", 3, 3, 1)]).divergence_points[0]
        support, oppose = point.viewpoints
        assert support.percentage + oppose.percentage + point.nuanced_percentage == 100

    def test_overall_is_participant_weighted(self, detector):
        result = detector.identify_divergence_points("t1", [
            prop("a", 5, 5, 0), prop("b", 6, 4, 0),
        ])
        scores = sorted(p.polarization_score for p in result.divergence_points)
        assert scores == [pytest.approx(0.8), pytest.approx(1.0)]
        assert result.overall_polarization == pytest.approx(0.9)

    def test_participants_are_unique_users(self, detector):
        result = detector.identify_divergence_points("t1", [
            prop("a", 5, 5, 0, alignments=[stance("u1", "SUPPORT"), stance("u2", "OPPOSE")]),
            prop("b", 9, 1, 0, alignments=[stance("u1", "SUPPORT"), stance("u3", "SUPPORT")]),
        ])
        assert result.participant_count == 3

    def test_fallback_reasoning(self, detector):
        point = detector.identify_divergence_points("t1", [prop("a", 5, 5, 0)]).divergence_points[0]
        assert point.viewpoints[0].reasoning == (SUPPORT_FALLBACK,)
        assert point.viewpoints[1].reasoning == (OPPOSE_FALLBACK,)


# ============================================================
# VALIDATION
# ============================================================

class TestAlignmentValidation:

    @pytest.mark.parametrize("record", [
        prop("a", -1, 0, 0),
        prop("a", True, 0, 0),
        prop("a", 1.5, 0, 0),
        prop("a", 1, 0, 0, consensus=1.5),
        prop("", 1, 0, 0),
        {**prop("a", 1, 0, 0), "statement": None},
        prop("a", 1, 0, 0, alignments=[stance("u1", "MAYBE")]),
        prop("a", 1, 0, 0, alignments=[stance("", "SUPPORT")]),
        prop("a", 1, 0, 0, alignments=[stance("u1", "SUPPORT", 42)]),
        {**prop("a", 1, 0, 0), "alignments": 5},
        {**prop("a", 1, 0, 0), "alignments": "u1:SUPPORT"},
        "not a record",
    ])
    def test_rejects_malformed(self, record):
        with pytest.raises(InvalidInputError):
            validate_alignments([record])

    @pytest.mark.parametrize("propositions", [5, None, "a,b", {"id": "a"}])
    def test_rejects_non_list_input(self, propositions):
        with pytest.raises(InvalidInputError):
            validate_alignments(propositions)

    def test_synthesize_rejects_whole_call(self, synth):
        with pytest.raises(InvalidInputError):
            synth.synthesize(topic(prop("a", 8, 1, 1), prop("b", -1, 0, 0)))

    def test_divergence_rejects_whole_call(self, detector):
        with pytest.raises(InvalidInputError):
            detector.identify_divergence_points("t1", [prop("a", 5, 5, 0), prop("b", 0, "x", 0)])

    def test_normalizes_stance_strings(self):
        (record,) = validate_alignments([prop("a", 1, 0, 0, alignments=[stance("u1", "OPPOSE")])])
        assert record.alignments[0].stance is Stance.OPPOSE
