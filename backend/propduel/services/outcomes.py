"""Outcome rolls and the mapping from a bet result to each side's result."""

from __future__ import annotations

import random

from propduel.models.enums import Outcome, PickType

_OUTCOMES: tuple[Outcome, ...] = (Outcome.WIN, Outcome.LOSS, Outcome.TBD)


def generate_outcome(rng: random.Random | None = None) -> Outcome:
    """Roll a resolution result: WIN, LOSS and TBD each with probability 1/3.

    For a custom bet WIN means OVER was correct and LOSS means UNDER was correct.
    For a standalone pick the result applies to the pick directly.
    """
    source = rng if rng is not None else random
    return _OUTCOMES[source.randrange(len(_OUTCOMES))]


class OutcomeGenerator:
    """Callable outcome source with its own seedable entropy."""

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)

    def __call__(self) -> Outcome:
        return generate_outcome(self.rng)


def opposite_pick(pick_type: PickType | str) -> PickType:
    return PickType.UNDER if PickType(pick_type) == PickType.OVER else PickType.OVER


def derive_personal_outcome(bet_outcome: Outcome | str, pick_type: PickType | str) -> Outcome:
    bet_outcome = Outcome(bet_outcome)
    if bet_outcome == Outcome.TBD:
        raise ValueError("TBD has no personal result")
    correct_side = PickType.OVER if bet_outcome == Outcome.WIN else PickType.UNDER
    return Outcome.WIN if PickType(pick_type) == correct_side else Outcome.LOSS


def personal_outcome_or_pending(bet_outcome: Outcome | str | None, pick_type: PickType | str) -> Outcome | None:
    if bet_outcome is None:
        return None
    if Outcome(bet_outcome) == Outcome.TBD:
        return Outcome.TBD
    return derive_personal_outcome(bet_outcome, pick_type)
