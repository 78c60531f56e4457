"""
Heuristic Trainer.

Non-learned baseline that scores each legal action from the current
state: training lanes by the stat gain the calculator predicts, the
other moves by simple vitality/motivation rules.
This policy can be used as a baseline for learned trainers.
"""

from typing import Sequence

import numpy as np

from career.actions import Action, ActionKind
from career.game import Game, Trainer
from career.state import ActionValue


# Priority weights for non-training actions
REST_VITAL = 40
OUTING_MOTIVATION = 4
SHINING_WEIGHT = 8.0
SKILL_PT_WEIGHT = 0.5
LOW_VITAL_PENALTY = 2.0


def estimate_train_utility(game: Game, train: int) -> float:
    """
    Estimate the value of training in a lane.

    Considers: predicted stat gain, skill points, friendship trainings
    available, and the vitality the lane costs when vitality is low.
    """
    buffs = game.calc_training_buff(train)
    value = game.calc_training_value(buffs, train)

    utility = float(sum(value.status_pt[:5])) + SKILL_PT_WEIGHT * value.status_pt[5]
    utility += SHINING_WEIGHT * game.shining_count(train)

    vital_after = game.uma.vital + value.vital
    if vital_after < REST_VITAL and value.vital < 0:
        utility += LOW_VITAL_PENALTY * value.vital
    return utility


def estimate_action_utility(game: Game, action: Action) -> float:
    """Estimate utility of any legal action."""
    uma = game.uma
    if action.kind == ActionKind.TRAIN:
        return estimate_train_utility(game, action.train)
    if action.kind == ActionKind.CLINIC:
        return 1000.0
    if action.kind == ActionKind.REST:
        return 500.0 if uma.vital < REST_VITAL else 0.0
    if action.kind in (ActionKind.FRIEND_OUTING, ActionKind.NORMAL_OUTING):
        if uma.motivation < OUTING_MOTIVATION:
            # Friend outings also restore more vitality
            return 400.0 if action.kind == ActionKind.FRIEND_OUTING else 300.0
        return 0.0
    if action.kind == ActionKind.RACE:
        return 20.0
    return 0.0


def choice_utility(choice: ActionValue) -> float:
    return float(sum(choice.status_pt[:5])) + SKILL_PT_WEIGHT * choice.status_pt[5] + choice.vital


class HeuristicTrainer(Trainer):
    """Greedy trainer. Ties go to the earliest action in the list."""

    def select_action(self, game: Game, actions: Sequence[Action], rng: np.random.Generator) -> int:
        utilities = [estimate_action_utility(game, a) for a in actions]
        return int(np.argmax(utilities))

    def select_choice(self, game: Game, choices: Sequence[ActionValue], rng: np.random.Generator) -> int:
        return int(np.argmax([choice_utility(c) for c in choices]))

