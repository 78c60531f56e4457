"""
Training Value Calculation.

Turns a lane, the summed support card effects on it, the facility level
and the trainee's motivation/growth into a stat delta. No randomness and
no side effects: the caller adds the result to the trainee.
"""

import math
from typing import Iterable, List, Sequence

from career.errors import InvalidLaneError
from career.gamedata import GameConstants
from career.state import (
    NUM_STATUS, NUM_TRAINS, RESERVED_PERSON_INDICES,
    ActionValue, CardTrainingEffect, SupportCard, Uma
)


WIZ_TRAIN = 4
HEADCOUNT_BONUS = 0.05


def check_lane(train: int) -> None:
    if train < 0 or train >= NUM_TRAINS:
        raise InvalidLaneError(f"invalid training lane: {train}")


def effective_person_count(occupants: Iterable[int]) -> int:
    """Persons in a lane, not counting the director and the reporter."""
    return sum(1 for p in occupants if p not in RESERVED_PERSON_INDICES)


def sum_card_effects(
    train: int,
    occupants: Sequence[int],
    deck: Sequence[SupportCard],
    is_shining: Sequence[bool]
) -> CardTrainingEffect:
    """
    Sum the effects of the deck cards standing in a lane.

    Args:
        train: Lane index
        occupants: Person indices in the lane
        deck: Deck cards; person index i < len(deck) is deck[i]
        is_shining: Per occupant, whether it shines at this lane.
            The friendship bonus of a card counts only when it shines.
    """
    check_lane(train)
    total = CardTrainingEffect()
    for index, shining in zip(occupants, is_shining):
        if index >= len(deck):
            continue
        effect = deck[index].effect
        if not shining:
            effect = CardTrainingEffect(
                motivation_bonus=effect.motivation_bonus,
                training_bonus=effect.training_bonus,
                vital_cost_drop=effect.vital_cost_drop,
                wiz_vital_bonus=effect.wiz_vital_bonus,
                specialty_rate=effect.specialty_rate,
                stat_bonus=list(effect.stat_bonus),
            )
        total = total.add(effect)
    return total


def calc_training_value(
    constants: GameConstants,
    train: int,
    buffs: CardTrainingEffect,
    train_level: int,
    uma: Uma,
    occupants: Sequence[int]
) -> ActionValue:
    """
    Compute the stat/vitality delta of training in a lane.

    Each stat slot with a positive base value gets
    (base + flat bonus) * friendship * motivation * training rate
    * headcount * growth, floored once at the end. Negative vitality is
    reduced by the vitality cost drop and truncated toward zero.
    """
    check_lane(train)
    basic_value = constants.training_value(train, train_level)
    person_count = effective_person_count(occupants)
    motivation = (uma.motivation - 3) * 10

    status_pt: List[int] = [0] * NUM_STATUS
    for i in range(NUM_STATUS):
        if basic_value[i] <= 0:
            continue
        raw = float(basic_value[i] + buffs.stat_bonus[i])
        raw *= 1.0 + 0.01 * buffs.friendship_bonus
        raw *= 1.0 + 0.01 * motivation * (1.0 + 0.01 * buffs.motivation_bonus)
        raw *= 1.0 + 0.01 * buffs.training_bonus
        raw *= 1.0 + HEADCOUNT_BONUS * max(0, person_count - 1)
        raw *= 1.0 + 0.01 * uma.five_status_bonus[i]
        status_pt[i] = math.floor(raw)

    vital = basic_value[NUM_STATUS]
    if train == WIZ_TRAIN:
        vital += buffs.wiz_vital_bonus
    if vital < 0:
        vital = int(vital * (1.0 - 0.01 * buffs.vital_cost_drop))

    return ActionValue(status_pt=status_pt, vital=vital)
