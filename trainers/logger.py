"""
JSONL Decision Logger for career runs.

Logs turn -> legal actions -> chosen action -> score records, one line per
trainer decision, plus an end-of-career record.
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import numpy as np

from career.actions import Action


logger = logging.getLogger(__name__)


def convert_numpy(obj: Any) -> Any:
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, dict):
        return {k: convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy(v) for v in obj]
    return obj


class RolloutLogger:
    """
    Logger for trainer decisions in JSONL format.
    """

    def __init__(self, log_dir: str = None, enabled: bool = True):
        """
        Initialize rollout logger.

        Args:
            log_dir: Directory to write logs. Defaults to ./rollout_logs/
            enabled: Whether logging is active
        """
        self.enabled = enabled
        self.log_dir = log_dir or os.path.join(os.getcwd(), "rollout_logs")
        self.current_file: Optional[str] = None
        self.current_career_id: Optional[str] = None
        self.step_idx = 0
        self.seed = None

        if self.enabled:
            os.makedirs(self.log_dir, exist_ok=True)

    def start_career(self, seed: int = None, career_id: str = None):
        """Start a new career."""
        if not self.enabled:
            return

        self.seed = seed
        self.step_idx = 0
        self.current_career_id = career_id or datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.current_file = os.path.join(self.log_dir, f"rollout_{timestamp}.jsonl")

    def log_decision(
        self,
        turn: int,
        actions: Sequence[Action],
        selection: int,
        score: int,
        obs: np.ndarray = None,
        info: Dict = None
    ):
        """
        Log a single trainer decision.

        Args:
            turn: Turn the decision was made on
            actions: Legal actions offered
            selection: Index of the chosen action
            score: Trainee score before the action
            obs: Observation vector (optional)
            info: Additional info
        """
        if not self.enabled or self.current_file is None:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "seed": convert_numpy(self.seed),
            "career_id": self.current_career_id,
            "step_idx": self.step_idx,
            "turn": int(turn),
            "actions": [a.to_dict() for a in actions],
            "selection": int(selection),
            "action": actions[selection].to_dict(),
            "score": int(score),
        }
        if obs is not None:
            entry["obs"] = convert_numpy(obs)
        if info:
            entry["info"] = convert_numpy(info)

        self._write(entry)
        self.step_idx += 1

    def end_career(self, final_info: Dict = None):
        """End current career."""
        if not self.enabled:
            return

        if final_info and self.current_file:
            self._write({
                "timestamp": datetime.now().isoformat(),
                "career_id": self.current_career_id,
                "type": "career_end",
                "total_steps": self.step_idx,
                "final_info": convert_numpy(final_info),
            })

        self.current_career_id = None
        self.step_idx = 0

    def _write(self, entry: Dict):
        try:
            with open(self.current_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Failed to write log entry: {e}")
