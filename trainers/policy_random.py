"""
Random Trainers.

RandomTrainer picks uniformly among legal actions. MonkeyTrainer walks the
actions in shuffled order and takes the first one that fits a crude
priority (rest when tired, outing when unmotivated, train otherwise).
"""

import logging
from typing import Sequence

import numpy as np

from career.actions import Action, ActionKind
from career.game import Game, Trainer
from career.state import ActionValue


logger = logging.getLogger(__name__)

TIRED_VITAL = 45
MAX_MOTIVATION = 5


class RandomTrainer(Trainer):
    """Uniform random choice among legal actions."""

    def select_action(self, game: Game, actions: Sequence[Action], rng: np.random.Generator) -> int:
        return int(rng.integers(0, len(actions)))


class MonkeyTrainer(Trainer):
    """Shuffled-priority trainer. Falls back to the first action."""

    def select_action(self, game: Game, actions: Sequence[Action], rng: np.random.Generator) -> int:
        uma = game.uma
        ret = 0
        for i in rng.permutation(len(actions)):
            kind = actions[i].kind
            if uma.vital < TIRED_VITAL:
                if kind == ActionKind.REST:
                    ret = int(i)
                    break
            elif uma.motivation < MAX_MOTIVATION:
                if kind in (ActionKind.NORMAL_OUTING, ActionKind.FRIEND_OUTING):
                    ret = int(i)
                    break
            elif kind == ActionKind.TRAIN:
                ret = int(i)
                break
        logger.info(f"Monkey trainer picked {actions[ret]}")
        return ret

    def select_choice(self, game: Game, choices: Sequence[ActionValue], rng: np.random.Generator) -> int:
        ret = int(rng.integers(0, len(choices)))
        logger.info(f"Choices {[c.to_dict() for c in choices]}, picked #{ret + 1}")
        return ret
