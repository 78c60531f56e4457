"""
Featurization: Convert a career game to a fixed-size observation vector.
"""

import numpy as np

from career.game import Game
from career.state import MAX_LANE_SIZE, NUM_TRAINS, FriendOutState
from trainers.schema import (
    ObservationSpec, MAX_LANE_VALUE, MAX_LEVEL, MAX_SKILL_PT
)


def clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Clamp value to range."""
    return max(min_val, min(max_val, value))


def scale(value: float, max_value: float, min_value: float = 0.0) -> float:
    """Scale value to [0, 1] range."""
    if max_value == min_value:
        return 0.0
    return clamp((value - min_value) / (max_value - min_value))


def lane_value_preview(game: Game, train: int) -> int:
    """Stat total the lane would give if trained now."""
    value = game.calc_training_value(game.calc_training_buff(train), train)
    return sum(value.status_pt)


def featurize_game(game: Game) -> np.ndarray:
    """Build the observation vector for the current state of a game."""
    obs = np.zeros(ObservationSpec.TOTAL_SIZE, dtype=np.float32)
    uma = game.uma

    i = ObservationSpec.GLOBAL_START
    obs[i] = scale(game.turn(), game.max_turn())
    obs[i + 1] = 1.0 if uma.is_race_turn(game.turn()) else 0.0

    i = ObservationSpec.UMA_START
    obs[i] = scale(uma.vital, uma.max_vital)
    obs[i + 1] = scale(uma.motivation, 5, 1)
    for k, stat in enumerate(uma.five_status):
        obs[i + 2 + k] = scale(stat, uma.status_limit)
    obs[i + 7] = scale(uma.skill_pt, MAX_SKILL_PT)
    obs[i + 8] = 1.0 if uma.flags.ill else 0.0

    for train in range(NUM_TRAINS):
        j = ObservationSpec.LANES_START + train * ObservationSpec.LANE_FEATURES
        obs[j] = scale(len(game.distribution[train]), MAX_LANE_SIZE)
        obs[j + 1] = scale(game.shining_count(train), MAX_LANE_SIZE)
        obs[j + 2] = scale(game.train_level(train), MAX_LEVEL)
        obs[j + 3] = scale(lane_value_preview(game, train), MAX_LANE_VALUE)

    i = ObservationSpec.FRIEND_START
    friend = getattr(game, "friend", None)
    if friend is not None:
        obs[i] = 1.0 if friend.out_state == FriendOutState.UNLOCKED else 0.0
    obs[i + 1] = 1.0 if game.has_group_buff() else 0.0

    return obs
