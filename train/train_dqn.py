"""
DQN Training Script for Trainer Policies.

Trains a DQN agent to pick career actions. Exploration and greedy picks
are both restricted to the actions legal in the current state.
Requires: pip install -e ".[train]"
"""

import logging
import os
import sys

import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

try:
    from stable_baselines3 import DQN
    from stable_baselines3.common.callbacks import CheckpointCallback
    from stable_baselines3.common.monitor import Monitor
except ImportError as e:
    print("Error: Training dependencies not installed.")
    print('Run: pip install -e ".[train]"')
    print(f"Missing: {e}")
    sys.exit(1)

from career.env import CareerGymEnv
from career.gamedata import init_global
from career.runner import init_logger
from trainers.schema import masked_argmax, sample_legal


class MaskedDQN(DQN):
    """DQN with action masking support."""

    _current_mask = None
    _mask_rng = None

    def set_action_mask(self, mask: np.ndarray):
        """Set current action mask, one row per environment (None disables masking)."""
        self._current_mask = None if mask is None else np.atleast_2d(mask)

    @property
    def mask_rng(self) -> np.random.Generator:
        if self._mask_rng is None:
            self._mask_rng = np.random.default_rng(self.seed)
        return self._mask_rng

    def env_action_masks(self) -> np.ndarray:
        """Masks of the training environments, from CareerGymEnv.action_masks()."""
        return np.array(self.env.env_method("action_masks"))

    def predict(self, observation, state=None, episode_start=None, deterministic=False):
        """Epsilon-greedy over legal actions only."""
        if self._current_mask is None:
            return super().predict(observation, state, episode_start, deterministic)

        if not deterministic and self.mask_rng.random() < self.exploration_rate:
            action = sample_legal(self._current_mask, self.mask_rng)
        else:
            obs_tensor = self.policy.obs_to_tensor(observation)[0]
            q_values = self.policy.q_net(obs_tensor).detach().cpu().numpy()
            action = masked_argmax(q_values, self._current_mask)

        if np.ndim(observation) == 1:
            return int(action[0]), state
        return action, state

    def _sample_action(self, learning_starts, action_noise=None, n_envs=1):
        self.set_action_mask(self.env_action_masks())
        if self.num_timesteps < learning_starts:
            action = sample_legal(self._current_mask, self.mask_rng)
        else:
            action, _ = self.predict(self._last_obs, deterministic=False)
        return action, action


def make_env(seed: int = None, scenario_config: dict = None):
    """Create and wrap environment."""
    env = CareerGymEnv(seed=seed, scenario_config=scenario_config, constants=init_global())
    return Monitor(env)


def train(
    total_timesteps: int = 50000,
    seed: int = 42,
    scenario_config: dict = None,
    save_path: str = None
):
    """
    Train masked DQN agent.

    Args:
        total_timesteps: Total training steps
        seed: Random seed
        scenario_config: Trainee, deck and inheritance
        save_path: Directory to save models
    """
    print("=" * 60)
    print("DQN Training for Career Trainers")
    print("=" * 60)

    if save_path is None:
        save_path = os.path.join(project_root, "models")
    os.makedirs(save_path, exist_ok=True)

    env = make_env(seed=seed, scenario_config=scenario_config)

    model = MaskedDQN(
        "MlpPolicy",
        env,
        learning_rate=1e-3,
        buffer_size=50000,
        learning_starts=1000,
        batch_size=64,
        gamma=0.99,
        exploration_fraction=0.3,
        exploration_final_eps=0.05,
        target_update_interval=500,
        seed=seed,
        verbose=1,
    )

    checkpoint_callback = CheckpointCallback(
        save_freq=10000,
        save_path=save_path,
        name_prefix="dqn_career"
    )

    print(f"\nTraining for {total_timesteps} timesteps...")
    model.learn(total_timesteps=total_timesteps, callback=checkpoint_callback)

    final_path = os.path.join(save_path, "dqn_career_policy")
    model.save(final_path)
    print(f"\nModel saved to {final_path}.zip")

    env.close()

    print("\n" + "=" * 60)
    print("Training complete!")
    print("=" * 60)

    return model


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Train DQN career trainer")
    parser.add_argument("--timesteps", type=int, default=50000, help="Total training timesteps")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--uma", type=int, default=None, help="Trainee id")

    args = parser.parse_args()

    init_logger(logging.WARNING)
    scenario_config = {"uma_id": args.uma} if args.uma is not None else None

    train(
        total_timesteps=args.timesteps,
        seed=args.seed,
        scenario_config=scenario_config,
    )


if __name__ == "__main__":
    main()
