"""
Headless Career Runner.

Run careers without UI for evaluation and data collection.
"""

import logging
import time
from collections import Counter
from typing import Dict, Sequence

import numpy as np

from career.actions import Action
from career.basic import BasicGame
from career.game import Game, Trainer, check_selection
from career.gamedata import GameConstants, init_global
from career.state import ActionValue, InheritInfo
from trainers.logger import RolloutLogger


logger = logging.getLogger(__name__)

DEFAULT_SCENARIO = {
    "uma_id": 101901,
    "deck": [302424, 302464, 302484, 302564, 302574, 302644],
    "inherit": {"blue_count": [15, 3, 0, 0, 0], "extra_count": [0, 30, 0, 0, 30, 30]},
}


def init_logger(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(levelname).1s %(message)s")


class RecordingTrainer(Trainer):
    """Wraps a trainer, counting its picks and logging them to a RolloutLogger."""

    def __init__(self, inner: Trainer, rollout_logger: RolloutLogger = None):
        self.inner = inner
        self.rollout_logger = rollout_logger
        self.picks: Counter = Counter()

    def select_action(self, game: Game, actions: Sequence[Action], rng: np.random.Generator) -> int:
        selection = check_selection(self.inner.select_action(game, actions, rng), len(actions), "action")
        self.picks[actions[selection].kind.value] += 1
        if self.rollout_logger:
            score = game.uma.calc_score(game.constants.status_soft_cap)
            self.rollout_logger.log_decision(game.turn(), actions, selection, score)
        return selection

    def select_choice(self, game: Game, choices: Sequence[ActionValue], rng: np.random.Generator) -> int:
        return self.inner.select_choice(game, choices, rng)


def new_game(constants: GameConstants, scenario_config: Dict = None) -> BasicGame:
    """Build a basic career from a scenario config (trainee, deck, inheritance)."""
    config = dict(DEFAULT_SCENARIO)
    config.update(scenario_config or {})
    return BasicGame.new_game(
        constants,
        int(config["uma_id"]),
        [int(c) for c in config["deck"]],
        InheritInfo.from_dict(config.get("inherit", {})),
    )


def run_career(
    game: Game,
    trainer: Trainer,
    rng: np.random.Generator,
    rollout_logger: RolloutLogger = None,
    seed: int = None
) -> Dict:
    """
    Run a single career to the end.

    Args:
        game: Freshly built game
        trainer: Policy picking actions and event choices
        rng: Random generator owned by this run
        rollout_logger: Optional decision logger
        seed: Seed recorded in the decision log

    Returns:
        Career statistics dict
    """
    recorder = RecordingTrainer(trainer, rollout_logger)
    if rollout_logger:
        rollout_logger.start_career(seed=seed)

    game.run_to_completion(recorder, rng)

    uma = game.uma
    score = uma.calc_score(game.constants.status_soft_cap)
    result = {
        "score": score,
        "rank": game.constants.get_rank_name(score),
        "five_status": list(uma.five_status),
        "skill_pt": uma.skill_pt,
        "final_turn": game.turn(),
        "events": dict(game.events),
        "actions": dict(recorder.picks),
    }
    if rollout_logger:
        rollout_logger.end_career(result)
    return result


def run_n_careers(
    constants: GameConstants,
    trainer: Trainer,
    n_careers: int = 10,
    base_seed: int = None,
    scenario_config: Dict = None,
    rollout_logger: RolloutLogger = None
) -> Dict:
    """
    Run independent careers and aggregate statistics.

    Every career gets its own game and its own generator.

    Returns:
        Aggregated statistics dict
    """
    all_results = []
    for i in range(n_careers):
        seed = base_seed + i if base_seed is not None else None
        game = new_game(constants, scenario_config)
        result = run_career(game, trainer, np.random.default_rng(seed), rollout_logger, seed)
        all_results.append(result)

    scores = [r["score"] for r in all_results]
    ranks = Counter(r["rank"] for r in all_results)
    return {
        "n_careers": n_careers,
        "avg_score": float(np.mean(scores)),
        "std_score": float(np.std(scores)),
        "max_score": int(np.max(scores)),
        "avg_status": np.mean([r["five_status"] for r in all_results], axis=0).tolist(),
        "ranks": dict(ranks),
        "all_results": all_results,
    }


def main():
    """Run a few careers with the heuristic trainer."""
    import argparse

    from trainers.policy_heuristic import HeuristicTrainer
    from trainers.policy_random import MonkeyTrainer, RandomTrainer

    trainers = {
        "heuristic": HeuristicTrainer,
        "monkey": MonkeyTrainer,
        "random": RandomTrainer,
    }

    parser = argparse.ArgumentParser(description="Run career simulations")
    parser.add_argument("--careers", type=int, default=10, help="Number of careers")
    parser.add_argument("--seed", type=int, default=42, help="Base random seed")
    parser.add_argument("--trainer", choices=sorted(trainers), default="heuristic")
    parser.add_argument("--verbose", action="store_true", help="Log every stage")
    parser.add_argument("--log-decisions", action="store_true", help="Write JSONL decision logs")
    args = parser.parse_args()

    init_logger(logging.INFO if args.verbose else logging.WARNING)
    constants = init_global()
    rollout_logger = RolloutLogger(enabled=args.log_decisions)

    print("=" * 60)
    print(f"Career Simulation Runner ({args.trainer})")
    print("=" * 60)

    start_time = time.time()
    results = run_n_careers(
        constants,
        trainers[args.trainer](),
        n_careers=args.careers,
        base_seed=args.seed,
        rollout_logger=rollout_logger,
    )
    elapsed = time.time() - start_time

    print(f"\nResults ({elapsed:.2f}s):")
    print(f"  Average Score: {results['avg_score']:.1f} ± {results['std_score']:.1f}")
    print(f"  Best Score: {results['max_score']}")
    print(f"  Average Status: {[round(s) for s in results['avg_status']]}")
    print(f"  Ranks: {results['ranks']}")


if __name__ == "__main__":
    main()
