"""
Gym-like Career Environment.

Provides a standard RL interface for training trainer policies.
Each step is one Train-stage decision; the stages in between (events,
distribution, end of turn) run automatically.
"""

from typing import Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from career.basic import MAX_TURN, BasicGame
from career.errors import GameOverError
from career.game import Trainer
from career.gamedata import GameConstants, init_global
from career.runner import new_game
from career.state import TurnStage
from trainers.featurize import featurize_game
from trainers.policy_heuristic import HeuristicTrainer
from trainers.schema import TOTAL_ACTIONS, action_index_to_action, get_observation_size, legal_indices


INVALID_ACTION_PENALTY = -1.0
SCORE_SCALE = 100.0
# one legal decision per turn leaves room for as many invalid picks again
DEFAULT_MAX_STEPS = 2 * (MAX_TURN + 1)


class CareerEnv:
    """
    Gym-like career environment for RL training.

    Event choices, which are not part of the action space, are delegated
    to choice_trainer.
    """

    def __init__(
        self,
        seed: int = None,
        scenario_config: Dict = None,
        constants: GameConstants = None,
        choice_trainer: Trainer = None,
        max_steps: int = DEFAULT_MAX_STEPS
    ):
        """
        Initialize career environment.

        Args:
            seed: Random seed for reproducibility
            scenario_config: Trainee, deck and inheritance (see runner.DEFAULT_SCENARIO)
            constants: Game tables; the process-wide ones by default
            choice_trainer: Picks event choices
            max_steps: Maximum steps (valid or not) before truncation
        """
        self.seed_value = seed
        self.scenario_config = scenario_config or {}
        self.constants = constants or init_global()
        self.choice_trainer = choice_trainer or HeuristicTrainer()
        self.max_steps = max_steps

        self.game: Optional[BasicGame] = None
        self.rng: Optional[np.random.Generator] = None
        self.step_count = 0
        self.episode_count = 0
        self.done = False
        self.truncated = False

        self.observation_size = get_observation_size()
        self.action_size = TOTAL_ACTIONS

    def reset(self, seed: int = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset environment to a new career.

        Returns:
            (observation, info)
        """
        if seed is not None:
            self.seed_value = seed
            self.episode_count = 0

        # Consecutive resets without a seed play different careers
        career_seed = None if self.seed_value is None else self.seed_value + self.episode_count
        self.episode_count += 1

        self.rng = np.random.default_rng(career_seed)
        self.game = new_game(self.constants, self.scenario_config)
        self.step_count = 0
        self.done = False
        self.truncated = False

        self._advance_to_train_stage()
        return self._get_observation(), self._get_info()

    def step(self, action_index: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Execute one action.

        Args:
            action_index: Index into the action catalog

        Returns:
            (observation, reward, done, truncated, info)
        """
        if self.game is None:
            raise RuntimeError("Environment not reset")
        if self.done or self.truncated:
            raise GameOverError("career finished, call reset()")

        self.step_count += 1
        reward_components = {"score_gain": 0, "invalid_action": False}

        action = action_index_to_action(int(action_index))
        if action not in self.game.list_actions():
            reward_components["invalid_action"] = True
            self.truncated = self.step_count >= self.max_steps
            info = self._get_info()
            info["reward_components"] = reward_components
            return self._get_observation(), INVALID_ACTION_PENALTY, False, self.truncated, info

        score_before = self._score()
        self.game.apply_action(action, self.rng)
        if self.game.advance_stage():
            self._advance_to_train_stage()
        else:
            self.done = True

        reward_components["score_gain"] = self._score() - score_before
        reward = reward_components["score_gain"] / SCORE_SCALE
        self.truncated = not self.done and self.step_count >= self.max_steps

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_observation(), reward, self.done, self.truncated, info

    def action_mask(self) -> np.ndarray:
        mask = np.zeros(self.action_size, dtype=bool)
        if self.game is not None and not self.done and not self.truncated:
            mask[legal_indices(self.game.list_actions())] = True
        return mask

    def _score(self) -> int:
        return self.game.uma.calc_score(self.constants.status_soft_cap)

    def _advance_to_train_stage(self) -> None:
        """Run stages until the next Train stage, or the end of the career."""
        while self.game.stage != TurnStage.TRAIN:
            self.game.run_stage(self.choice_trainer, self.rng)
            if not self.game.advance_stage():
                self.done = True
                return

    def _get_observation(self) -> np.ndarray:
        if self.game is None:
            return np.zeros(self.observation_size, dtype=np.float32)
        return featurize_game(self.game)

    def _get_info(self) -> Dict:
        if self.game is None:
            return {"action_mask": np.zeros(self.action_size, dtype=bool)}
        return {
            "action_mask": self.action_mask(),
            "turn": self.game.turn(),
            "score": self._score(),
            "step_count": self.step_count,
        }

    def render_text(self) -> str:
        """Render current state as text for debugging."""
        if self.game is None:
            return "Environment not reset"
        return "\n".join([self.game.explain(), self.game.explain_distribution()])


class CareerGymEnv(gym.Env):
    """Gymnasium-compatible wrapper for CareerEnv."""

    metadata = {"render_modes": ["text"]}

    def __init__(
        self,
        seed: int = None,
        scenario_config: Dict = None,
        constants: GameConstants = None,
        max_steps: int = DEFAULT_MAX_STEPS
    ):
        super().__init__()

        self.env = CareerEnv(
            seed=seed,
            scenario_config=scenario_config,
            constants=constants,
            max_steps=max_steps
        )

        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(self.env.observation_size,),
            dtype=np.float32
        )
        self.action_space = spaces.Discrete(self.env.action_size)

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        return self.env.reset(seed=seed)

    def step(self, action):
        return self.env.step(action)

    def render(self):
        return self.env.render_text()

    def action_masks(self) -> np.ndarray:
        """Current action mask for masked action selection."""
        return self.env.action_mask()
