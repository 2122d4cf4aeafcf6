import random
from collections import Counter

import pytest

from propduel.models.enums import Outcome, PickType
from propduel.services.outcomes import (
    OutcomeGenerator,
    derive_personal_outcome,
    generate_outcome,
    opposite_pick,
    personal_outcome_or_pending,
)


def test_outcomes_are_roughly_one_third_each() -> None:
    rng = random.Random(1234)
    trials = 30_000
    counts = Counter(generate_outcome(rng) for _ in range(trials))
    assert set(counts) == {Outcome.WIN, Outcome.LOSS, Outcome.TBD}
    for outcome in Outcome:
        assert counts[outcome] / trials == pytest.approx(1 / 3, abs=0.02)


def test_seeded_generator_is_reproducible() -> None:
    first = OutcomeGenerator(seed=7)
    second = OutcomeGenerator(seed=7)
    assert [first() for _ in range(50)] == [second() for _ in range(50)]


def test_unseeded_module_roll_returns_an_outcome() -> None:
    assert generate_outcome() in set(Outcome)


def test_opposite_pick_flips_sides() -> None:
    assert opposite_pick(PickType.OVER) == PickType.UNDER
    assert opposite_pick("UNDER") == PickType.OVER


@pytest.mark.parametrize(
    "bet_outcome, pick, expected",
    [
        (Outcome.WIN, PickType.OVER, Outcome.WIN),
        (Outcome.WIN, PickType.UNDER, Outcome.LOSS),
        (Outcome.LOSS, PickType.OVER, Outcome.LOSS),
        (Outcome.LOSS, PickType.UNDER, Outcome.WIN),
        ("WIN", "OVER", Outcome.WIN),
    ],
)
def test_derive_personal_outcome(bet_outcome, pick, expected) -> None:
    assert derive_personal_outcome(bet_outcome, pick) == expected


def test_derive_personal_outcome_rejects_tbd() -> None:
    with pytest.raises(ValueError):
        derive_personal_outcome(Outcome.TBD, PickType.OVER)


def test_personal_outcome_or_pending_passes_through_tbd_and_missing() -> None:
    assert personal_outcome_or_pending(None, PickType.OVER) is None
    assert personal_outcome_or_pending(Outcome.TBD, PickType.UNDER) == Outcome.TBD
    assert personal_outcome_or_pending(Outcome.LOSS, PickType.UNDER) == Outcome.WIN
