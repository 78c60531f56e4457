"""
Evaluation Script for Trainer Policies.

Runs Monte Carlo careers for each trainer and compares score statistics.
"""

import logging
import os
import sys
from typing import Dict, Sequence

import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from career.actions import Action
from career.game import Game, Trainer
from career.gamedata import GameConstants, init_global
from career.runner import init_logger, run_n_careers
from trainers.featurize import featurize_game
from trainers.policy_heuristic import HeuristicTrainer
from trainers.policy_random import MonkeyTrainer, RandomTrainer
from trainers.schema import legal_indices


class DQNTrainer(Trainer):
    """Trainer backed by a trained DQN; illegal actions are masked out."""

    def __init__(self, model):
        self.model = model

    def select_action(self, game: Game, actions: Sequence[Action], rng: np.random.Generator) -> int:
        obs = featurize_game(game)
        obs_tensor = self.model.policy.obs_to_tensor(obs.reshape(1, -1))[0]
        q_values = self.model.policy.q_net(obs_tensor).detach().cpu().numpy().flatten()

        legal = legal_indices(actions)
        return int(np.argmax(q_values[legal]))


def load_trained_policy(model_path: str = None):
    """
    Load trained DQN policy.

    Returns a Trainer, or None when no model is available.
    """
    if model_path is None:
        model_path = os.path.join(project_root, "models", "dqn_career_policy.zip")

    if not os.path.exists(model_path):
        print(f"Warning: Model not found at {model_path}")
        return None

    try:
        from stable_baselines3 import DQN
    except ImportError:
        print("Warning: stable-baselines3 not installed, cannot load trained model")
        return None

    return DQNTrainer(DQN.load(model_path))


def evaluate_policies(
    constants: GameConstants,
    policies: Dict[str, Trainer],
    n_careers: int = 50,
    seed: int = 42,
    scenario_config: Dict = None
) -> Dict[str, Dict]:
    """
    Evaluate multiple trainers on the same seeds.

    Args:
        constants: Game tables
        policies: Dict of trainer_name -> trainer
        n_careers: Careers per trainer
        seed: Base random seed
        scenario_config: Trainee, deck and inheritance

    Returns:
        Dict of trainer_name -> results
    """
    results = {}

    for name, trainer in policies.items():
        print(f"\nEvaluating: {name}")
        print("-" * 40)

        policy_results = run_n_careers(
            constants,
            trainer,
            n_careers=n_careers,
            base_seed=seed,
            scenario_config=scenario_config,
        )
        results[name] = policy_results

        print(f"  Average Score: {policy_results['avg_score']:.1f} ± {policy_results['std_score']:.1f}")
        print(f"  Best Score: {policy_results['max_score']}")
        print(f"  Ranks: {policy_results['ranks']}")

    return results


def print_comparison(results: Dict[str, Dict]):
    """Print comparison table."""
    print("\n" + "=" * 70)
    print("TRAINER COMPARISON")
    print("=" * 70)

    print(f"{'Trainer':<20} {'Score':>16} {'Best':>10} {'Speed':>10} {'Wit':>10}")
    print("-" * 70)

    for name, r in results.items():
        score = f"{r['avg_score']:.1f}±{r['std_score']:.1f}"
        speed = f"{r['avg_status'][0]:.0f}"
        wit = f"{r['avg_status'][4]:.0f}"
        print(f"{name:<20} {score:>16} {r['max_score']:>10} {speed:>10} {wit:>10}")

    print("=" * 70)

    best_name = max(results.keys(), key=lambda k: results[k]['avg_score'])
    print(f"\nBest trainer by score: {best_name}")


def main():
    """Main evaluation entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Evaluate trainer policies")
    parser.add_argument("--careers", type=int, default=50, help="Careers per trainer")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--model", type=str, default=None, help="Path to trained model")

    args = parser.parse_args()

    init_logger(logging.WARNING)
    constants = init_global()

    print("=" * 60)
    print("Trainer Evaluation")
    print("=" * 60)

    policies = {
        "Heuristic": HeuristicTrainer(),
        "Monkey": MonkeyTrainer(),
        "Random": RandomTrainer(),
    }

    trained = load_trained_policy(args.model)
    if trained is not None:
        policies["Trained DQN"] = trained

    results = evaluate_policies(constants, policies, n_careers=args.careers, seed=args.seed)
    print_comparison(results)

    print("\nEvaluation complete!")


if __name__ == "__main__":
    main()
