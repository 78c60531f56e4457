# Trainer policies for career simulation
# This module provides:
# - schema.py: action catalog and observation layout
# - featurize.py: game state to numeric vector conversion
# - policy_random.py: uniform and shuffled-priority random trainers
# - policy_heuristic.py: training-value driven trainer
# - logger.py: JSONL decision logging

__version__ = "0.1.0"
