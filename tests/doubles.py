"""
Test doubles for career simulation tests.
"""


class RiggedRng:
    """Generator double: choice() returns scripted draws, repeating the last one."""

    def __init__(self, draws, uniform=0.5, integer=0):
        self.draws = list(draws)
        self.uniform = uniform
        self.integer = integer
        self.choice_calls = 0

    def choice(self, n, p=None):
        draw = self.draws[min(self.choice_calls, len(self.draws) - 1)]
        self.choice_calls += 1
        return draw

    def random(self):
        return self.uniform

    def integers(self, low, high=None):
        return self.integer
