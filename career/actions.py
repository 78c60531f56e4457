"""
Player Actions.

The closed set of moves a trainer can pick each turn, and the handler
table that applies them. ActionHandlers only logs; game variants subclass
it and override the do_* methods with real effects.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List

import numpy as np

from career.errors import InvalidLaneError
from career.state import NUM_TRAINS


logger = logging.getLogger(__name__)


class ActionKind(Enum):
    TRAIN = "train"
    RACE = "race"
    REST = "rest"
    FRIEND_OUTING = "friend_outing"
    NORMAL_OUTING = "normal_outing"
    CLINIC = "clinic"


@dataclass(frozen=True)
class Action:
    """One move. train is the lane for TRAIN and -1 otherwise."""
    kind: ActionKind
    train: int = -1

    @classmethod
    def train_at(cls, train: int) -> "Action":
        if train < 0 or train >= NUM_TRAINS:
            raise InvalidLaneError(f"invalid training lane: {train}")
        return cls(ActionKind.TRAIN, train)

    def to_dict(self) -> Dict:
        return {"kind": self.kind.value, "train": self.train}

    def __str__(self) -> str:
        if self.kind == ActionKind.TRAIN:
            return f"train({self.train})"
        return self.kind.value


RACE = Action(ActionKind.RACE)
REST = Action(ActionKind.REST)
FRIEND_OUTING = Action(ActionKind.FRIEND_OUTING)
NORMAL_OUTING = Action(ActionKind.NORMAL_OUTING)
CLINIC = Action(ActionKind.CLINIC)
TRAIN_ACTIONS = tuple(Action.train_at(i) for i in range(NUM_TRAINS))


class ActionHandlers:
    """
    Applies actions to a game.

    The dispatch table is fixed; handlers get the game and the run's
    generator and touch nothing else.
    """

    def do_train(self, game: Any, train: int, rng: np.random.Generator) -> None:
        logger.info(f">> Train {train}")

    def do_race(self, game: Any, rng: np.random.Generator) -> None:
        logger.info(">> Race")

    def do_rest(self, game: Any, rng: np.random.Generator) -> None:
        logger.info(">> Rest")

    def do_friend_outing(self, game: Any, rng: np.random.Generator) -> None:
        logger.info(">> Friend outing")

    def do_normal_outing(self, game: Any, rng: np.random.Generator) -> None:
        logger.info(">> Outing")

    def do_clinic(self, game: Any, rng: np.random.Generator) -> None:
        logger.info(">> Clinic")

    def dispatch_table(self) -> Dict[ActionKind, Callable[[Any, Action, np.random.Generator], None]]:
        return {
            ActionKind.TRAIN: lambda game, action, rng: self.do_train(game, action.train, rng),
            ActionKind.RACE: lambda game, action, rng: self.do_race(game, rng),
            ActionKind.REST: lambda game, action, rng: self.do_rest(game, rng),
            ActionKind.FRIEND_OUTING: lambda game, action, rng: self.do_friend_outing(game, rng),
            ActionKind.NORMAL_OUTING: lambda game, action, rng: self.do_normal_outing(game, rng),
            ActionKind.CLINIC: lambda game, action, rng: self.do_clinic(game, rng),
        }

    def apply(self, action: Action, game: Any, rng: np.random.Generator) -> None:
        self.dispatch_table()[action.kind](game, action, rng)


def base_actions(is_race_turn: bool) -> List[Action]:
    """Train actions, or only Race on a scripted race turn."""
    if is_race_turn:
        return [RACE]
    return list(TRAIN_ACTIONS)
