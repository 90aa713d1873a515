"""Unit tests for decision sources."""

import pytest
from grammargen.choices import (
    Decision,
    DecisionKind,
    DecisionSource,
    RandomDecisionSource,
    RecordingDecisionSource,
    RepetitionSite,
    ScriptedDecisionSource,
    create_source,
)
from grammargen.core.config import DecisionConfig
from grammargen.errors import InvalidDecision, ScriptExhausted, ScriptMismatch

SITE = RepetitionSite(0, "foo")


class TestDecision:
    """Tests for Decision script entries."""

    def test_helpers(self):
        assert Decision.pick(2) == Decision(DecisionKind.ALTERNATIVE, 2)
        assert Decision.include().value is True
        assert Decision.skip().value is False
        assert Decision.repeat(3, on=1).occurrence == 1

    def test_codepoint_from_string(self):
        assert Decision.codepoint("a").value == 0x61
        assert Decision.codepoint("\U0001F600").value == 0x1F600

    def test_codepoint_rejects_long_string(self):
        with pytest.raises(ValueError):
            Decision.codepoint("ab")

    def test_str(self):
        assert str(Decision.pick(1)) == "alternative(1)"
        assert str(Decision.repeat(2, on=0)) == "repetition(2, on=0)"
        assert str(Decision.codepoint("\t")) == "codepoint(U+0009)"


class TestRandomDecisionSource:
    """Tests for RandomDecisionSource."""

    def test_is_decision_source(self):
        assert isinstance(RandomDecisionSource(), DecisionSource)
        assert RandomDecisionSource().source_name == "random"

    def test_same_seed_same_answers(self):
        a = RandomDecisionSource(seed=42)
        b = RandomDecisionSource(seed=42)
        assert [a.pick_alternative(10) for _ in range(20)] == [b.pick_alternative(10) for _ in range(20)]

    def test_alternative_in_range(self):
        source = RandomDecisionSource(seed=1)
        assert all(0 <= source.pick_alternative(3) < 3 for _ in range(100))

    def test_repetition_within_bounds(self):
        source = RandomDecisionSource(seed=1, continuation_probability=0.9, repetition_decay=0.9)
        counts = [source.pick_repetition_count(2, 5, SITE) for _ in range(200)]
        assert min(counts) >= 2
        assert max(counts) <= 5

    def test_unbounded_repetition_terminates(self):
        source = RandomDecisionSource(seed=3, continuation_probability=1.0, repetition_decay=0.5)
        counts = [source.pick_repetition_count(0, None, SITE) for _ in range(200)]
        assert min(counts) >= 1

    def test_zero_continuation_always_gives_minimum(self):
        source = RandomDecisionSource(seed=1, continuation_probability=0.0)
        assert {source.pick_repetition_count(3, None, SITE) for _ in range(50)} == {3}

    def test_repetitions_decay(self):
        source = RandomDecisionSource(seed=5)
        counts = [source.pick_repetition_count(0, None, SITE) for _ in range(2000)]
        assert counts.count(0) > counts.count(1) > counts.count(2)

    def test_optional_probability_extremes(self):
        assert not any(RandomDecisionSource(seed=1, optional_probability=0.0).include_optional()
                       for _ in range(50))
        assert all(RandomDecisionSource(seed=1, optional_probability=1.0).include_optional()
                   for _ in range(50))

    def test_codepoint_from_candidates(self):
        source = RandomDecisionSource(seed=1)
        assert {source.pick_codepoint((1, 2, 3)) for _ in range(100)} == {1, 2, 3}

    def test_invalid_probability(self):
        with pytest.raises(ValueError):
            RandomDecisionSource(continuation_probability=1.5)

    def test_never_ending_configuration_is_rejected(self):
        with pytest.raises(ValueError):
            RandomDecisionSource(continuation_probability=1.0, repetition_decay=1.0)

    def test_from_config(self):
        source = RandomDecisionSource.from_config(DecisionConfig(seed=9, optional_probability=0.25))
        assert source.seed == 9
        assert source.optional_probability == 0.25


class TestScriptedDecisionSource:
    """Tests for ScriptedDecisionSource."""

    def test_answers_in_order(self):
        source = ScriptedDecisionSource([
            Decision.pick(1),
            Decision.include(),
            Decision.repeat(4),
            Decision.codepoint(9),
        ])
        assert source.pick_alternative(2) == 1
        assert source.include_optional() is True
        assert source.pick_repetition_count(0, None, SITE) == 4
        assert source.pick_codepoint((9, 10)) == 9
        assert source.remaining == 0

    def test_exhausted(self):
        source = ScriptedDecisionSource([Decision.pick(0)])
        source.pick_alternative(2)
        with pytest.raises(ScriptExhausted) as exc_info:
            source.pick_alternative(2)
        assert exc_info.value.consumed == 1

    def test_empty_script_never_falls_back(self):
        with pytest.raises(ScriptExhausted):
            ScriptedDecisionSource().include_optional()

    def test_mismatch(self):
        source = ScriptedDecisionSource([Decision.skip()])
        with pytest.raises(ScriptMismatch) as exc_info:
            source.pick_alternative(2)
        assert exc_info.value.requested == "alternative"
        # The mismatched entry is not consumed
        assert source.include_optional() is False

    def test_keyed_repetitions(self):
        source = ScriptedDecisionSource([Decision.repeat(5, on=1), Decision.repeat(2)])
        assert source.pick_repetition_count(0, None, RepetitionSite(0)) == 2
        assert source.pick_repetition_count(0, None, RepetitionSite(1)) == 5

    def test_keyed_entry_must_be_repetition(self):
        with pytest.raises(ValueError):
            ScriptedDecisionSource([Decision(DecisionKind.OPTIONAL, True, occurrence=0)])

    def test_site_scripted_twice(self):
        with pytest.raises(ValueError):
            ScriptedDecisionSource([Decision.repeat(1, on=0), Decision.repeat(2, on=0)])

    def test_rejects_non_decisions(self):
        with pytest.raises(TypeError):
            ScriptedDecisionSource([1, 2])

    def test_codepoint_not_offered(self):
        source = ScriptedDecisionSource([Decision.codepoint("x")])
        with pytest.raises(InvalidDecision):
            source.pick_codepoint((9,))


class TestRecordingDecisionSource:
    """Tests for RecordingDecisionSource."""

    def test_records_answers(self):
        recorder = RecordingDecisionSource(ScriptedDecisionSource([
            Decision.pick(1),
            Decision.skip(),
            Decision.repeat(2),
            Decision.codepoint(10),
        ]))
        recorder.pick_alternative(3)
        recorder.include_optional()
        recorder.pick_repetition_count(0, None, SITE)
        recorder.pick_codepoint((9, 10))

        assert recorder.decisions == [
            Decision.pick(1),
            Decision.skip(),
            Decision.repeat(2),
            Decision.codepoint(10),
        ]
        assert recorder.source_name == "recording(scripted)"

    def test_replay(self):
        recorder = RecordingDecisionSource(RandomDecisionSource(seed=8))
        answers = [recorder.pick_alternative(5) for _ in range(10)]

        replay = recorder.replay()
        assert [replay.pick_alternative(5) for _ in range(10)] == answers


class TestCreateSource:
    """Tests for the create_source factory."""

    def test_random(self):
        assert isinstance(create_source("random", seed=1), RandomDecisionSource)

    def test_scripted(self):
        source = create_source("scripted", decisions=[Decision.pick(0)])
        assert isinstance(source, ScriptedDecisionSource)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_source("psychic")
