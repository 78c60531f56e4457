"""
Person Distribution.

Assigns training persons to the five lanes each turn with weighted
sampling. A lane holds at most five persons, never the same person twice
and at most one friend-classified person.
"""

import logging
from typing import Callable, List, Optional, Sequence

import numpy as np

from career.state import MAX_LANE_SIZE, NUM_TRAINS, Person, PersonType


logger = logging.getLogger(__name__)

Distribution = List[List[int]]

MAX_PLACEMENT_RETRIES = 10
LANE_WEIGHT = 100
CARD_ABSENT_RATE = 50
DEFAULT_ABSENT_RATE = 100
NPC_ROLE_ABSENT_RATE = 200   # director and reporter rarely show up

# Higher priority categories claim lane capacity first
DISTRIBUTE_SEQUENCE = (
    PersonType.DIRECTOR,
    PersonType.REPORTER,
    PersonType.SCENARIO_CARD,
    PersonType.TEAM_CARD,
    PersonType.SUPPORT_CARD,
    PersonType.NPC,
)


def empty_distribution() -> Distribution:
    return [[] for _ in range(NUM_TRAINS)]


def weighted_choice(rng: np.random.Generator, weights: Sequence[float]) -> int:
    """Draw an index with probability proportional to its weight."""
    total = float(sum(weights))
    if total <= 0:
        raise ValueError(f"weights must have a positive sum: {list(weights)}")
    p = [w / total for w in weights]
    return int(rng.choice(len(weights), p=p))


def absent_rate(person: Person, absent_rate_drop: int, allow_absent: bool = True) -> int:
    """Weight of the 'not at training' outcome for a person."""
    if not allow_absent:
        return 0
    if person.person_type == PersonType.SUPPORT_CARD:
        rate = CARD_ABSENT_RATE - absent_rate_drop
    elif person.person_type in (PersonType.DIRECTOR, PersonType.REPORTER):
        rate = NPC_ROLE_ABSENT_RATE
    else:
        rate = DEFAULT_ABSENT_RATE - absent_rate_drop
    return max(0, rate)


def lane_weights(person: Person, specialty_rate: float) -> List[int]:
    """Five lane weights, with the specialty bonus on the person's own lane."""
    weights = [LANE_WEIGHT] * NUM_TRAINS
    if 0 <= person.train_type < NUM_TRAINS:
        weights[person.train_type] += int(specialty_rate)
    return weights


def can_place(distribution: Distribution, persons: Sequence[Person], person: Person, train: int) -> bool:
    lane = distribution[train]
    if len(lane) >= MAX_LANE_SIZE or person.person_index in lane:
        return False
    if person.is_friend() and any(persons[i].is_friend() for i in lane):
        return False
    return True


def find_lane(
    distribution: Distribution,
    persons: Sequence[Person],
    person: Person,
    weights: Sequence[int],
    rng: np.random.Generator,
    max_retries: int = MAX_PLACEMENT_RETRIES
) -> Optional[int]:
    """
    Sample lanes until one accepts the person.

    Returns:
        The accepted lane, or None after max_retries rejected draws.
    """
    for _ in range(max_retries):
        train = weighted_choice(rng, weights)
        if can_place(distribution, persons, person, train):
            return train
    return None


def distribute_person(
    distribution: Distribution,
    persons: Sequence[Person],
    person_index: int,
    allow_absent: bool,
    absent_rate_drop: int,
    specialty_rate: float,
    rng: np.random.Generator
) -> Optional[int]:
    """
    Place one person into the distribution.

    Args:
        distribution: Lanes to place into (modified in place)
        persons: Full roster, indexed by person_index
        person_index: Person to place
        allow_absent: If False the person cannot draw "absent"
        absent_rate_drop: Game-wide reduction of the absent weight
        specialty_rate: Extra weight on the person's own lane
        rng: Random generator

    Returns:
        The lane the person was placed in, or None if absent or no lane
        accepted the person.
    """
    person = persons[person_index]
    weights = lane_weights(person, specialty_rate)
    absent = absent_rate(person, absent_rate_drop, allow_absent)

    if weighted_choice(rng, weights + [absent]) == NUM_TRAINS:
        return None

    train = find_lane(distribution, persons, person, weights, rng)
    if train is None:
        logger.warning(f"Failed to place person #{person_index} after {MAX_PLACEMENT_RETRIES} tries")
        return None

    distribution[train].append(person_index)
    return train


def reset_distribution(distribution: Distribution) -> Distribution:
    """Clear to exactly five empty lanes, in place."""
    distribution.clear()
    distribution.extend(empty_distribution())
    return distribution


def distribute_all(
    distribution: Distribution,
    persons: Sequence[Person],
    absent_rate_drop: int,
    specialty_rate: Callable[[int], float],
    rng: np.random.Generator
) -> Distribution:
    """Reset the distribution and place everyone, one category at a time."""
    reset_distribution(distribution)
    for person_type in DISTRIBUTE_SEQUENCE:
        for i, person in enumerate(persons):
            if person.person_type == person_type:
                distribute_person(distribution, persons, i, True, absent_rate_drop, specialty_rate(i), rng)
    return distribution


def at_trains(distribution: Distribution, person_index: int) -> List[bool]:
    """Which lanes the person currently occupies."""
    return [person_index in lane for lane in distribution]
