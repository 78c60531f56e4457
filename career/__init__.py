# Career training simulation
# This module provides:
# - state.py: value types, persons, trainee and shared career state
# - gamedata.py: read-only game tables and card data
# - distribution.py: weighted person-to-lane distribution
# - training.py: training value calculation
# - actions.py: action set and handler dispatch
# - game.py: Game / Trainer contracts
# - basic.py: the basic (no scenario) career
# - env.py: Gym-like environment wrapper
# - runner.py: headless career runner

__version__ = "0.1.0"
