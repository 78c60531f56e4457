"""
Action Catalog and Observation Schema.

Fixed-size numbering of career actions and the layout of the observation
vector used by the environment and learned trainers.
"""

from typing import Dict, List, Sequence

import numpy as np

from career.actions import (
    Action, CLINIC, FRIEND_OUTING, NORMAL_OUTING, RACE, REST, TRAIN_ACTIONS
)
from career.state import NUM_TRAINS

# =============================================================================
# ACTION SPACE
# =============================================================================

# 0-4: train lane, then the non-training moves
ACTION_CATALOG = TRAIN_ACTIONS + (RACE, REST, FRIEND_OUTING, NORMAL_OUTING, CLINIC)
TOTAL_ACTIONS = len(ACTION_CATALOG)   # 10

_ACTION_INDEX: Dict[Action, int] = {action: i for i, action in enumerate(ACTION_CATALOG)}


def action_index_to_action(action_index: int) -> Action:
    """Convert catalog index to Action."""
    if not 0 <= action_index < TOTAL_ACTIONS:
        raise IndexError(f"action index out of range: {action_index}")
    return ACTION_CATALOG[action_index]


def action_to_index(action: Action) -> int:
    return _ACTION_INDEX[action]


def legal_indices(actions: Sequence[Action]) -> List[int]:
    return [action_to_index(a) for a in actions]


def masked_argmax(q_values: np.ndarray, masks: np.ndarray) -> np.ndarray:
    """
    Best legal catalog index per row.

    Args:
        q_values: (n_envs, TOTAL_ACTIONS) scores
        masks: Boolean masks of the same shape

    Returns:
        (n_envs,) array of catalog indices
    """
    masks = np.atleast_2d(masks)
    if not masks.any(axis=1).all():
        raise ValueError("every mask row needs at least one legal action")
    return np.argmax(np.where(masks, np.atleast_2d(q_values), -np.inf), axis=1)


def sample_legal(masks: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Uniformly random legal catalog index per mask row."""
    masks = np.atleast_2d(masks)
    if not masks.any(axis=1).all():
        raise ValueError("every mask row needs at least one legal action")
    return np.array([rng.choice(np.flatnonzero(row)) for row in masks])


# =============================================================================
# OBSERVATION SCHEMA
# =============================================================================

class ObservationSpec:
    """Defines the observation vector structure."""

    # A) Progress (2 values): turn fraction, is race turn
    GLOBAL_START = 0
    GLOBAL_SIZE = 2

    # B) Trainee (9 values): vital, motivation, five stats, skill pt, ill
    UMA_START = GLOBAL_START + GLOBAL_SIZE
    UMA_SIZE = 9

    # C) Lanes (5 lanes * 4 features): headcount, shining count,
    #    facility level, preview of the training value
    LANES_START = UMA_START + UMA_SIZE
    LANE_FEATURES = 4
    LANES_SIZE = NUM_TRAINS * LANE_FEATURES

    # D) Friend state (2 values): outing unlocked, group buff on
    FRIEND_START = LANES_START + LANES_SIZE
    FRIEND_SIZE = 2

    TOTAL_SIZE = FRIEND_START + FRIEND_SIZE


# Scaling constants for normalization
MAX_SKILL_PT = 2000
MAX_LANE_VALUE = 100
MAX_LEVEL = 5


def get_observation_size() -> int:
    return ObservationSpec.TOTAL_SIZE


def get_action_size() -> int:
    return TOTAL_ACTIONS
