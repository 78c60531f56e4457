"""
Shared fixtures for career simulation tests.
"""

import numpy as np
import pytest

from career.gamedata import load_game_constants
from career.runner import new_game


@pytest.fixture(scope="session")
def constants():
    return load_game_constants()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def game(constants):
    return new_game(constants)
