"""
Game and Trainer Contracts.

Game is the interface every career variant implements: turn/stage
progression, action listing, the person roster and its distribution, and
the trainee. Shared behavior (event rolls, distribution, shining checks,
training value, the full simulation loop) is provided here once.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

import numpy as np

from career import distribution as dist
from career import training
from career.actions import Action, ActionHandlers
from career.errors import TrainerError
from career.gamedata import GameConstants
from career.state import (
    ActionValue, CardTrainingEffect, EventData, Person, PersonType, SupportCard, TurnStage, Uma
)


logger = logging.getLogger(__name__)

SHINING_FRIENDSHIP = 80


class Trainer(ABC):
    """Picks one of the offered actions (or event choices) each time it is asked."""

    @abstractmethod
    def select_action(self, game: "Game", actions: Sequence[Action], rng: np.random.Generator) -> int:
        ...

    def select_choice(self, game: "Game", choices: Sequence[ActionValue], rng: np.random.Generator) -> int:
        return int(rng.integers(0, len(choices)))


def check_selection(selection: int, count: int, what: str) -> int:
    if not isinstance(selection, (int, np.integer)) or not 0 <= selection < count:
        raise TrainerError(f"trainer picked {what} {selection!r} out of {count}")
    return int(selection)


class Game(ABC):
    """Career state machine over pluggable game variants."""

    action_handlers: ActionHandlers = ActionHandlers()

    # -------------------------------------------------------------------------
    # Turns and stages
    # -------------------------------------------------------------------------

    @abstractmethod
    def turn(self) -> int:
        ...

    @abstractmethod
    def max_turn(self) -> int:
        ...

    @property
    @abstractmethod
    def stage(self) -> TurnStage:
        ...

    @abstractmethod
    def advance_stage(self) -> bool:
        """Move to the next stage. False once the last stage of max_turn is done."""

    @abstractmethod
    def run_stage(self, trainer: Trainer, rng: np.random.Generator) -> None:
        ...

    def run_to_completion(self, trainer: Trainer, rng: np.random.Generator) -> None:
        """Run every remaining stage until the career ends."""
        self.run_stage(trainer, rng)
        while self.advance_stage():
            self.run_stage(trainer, rng)

    # -------------------------------------------------------------------------
    # Actions and events
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def events(self) -> Dict[int, int]:
        """Trigger count per event id."""

    @abstractmethod
    def list_actions(self) -> List[Action]:
        ...

    @abstractmethod
    def list_events(self) -> List[EventData]:
        ...

    def apply_event(
        self,
        event: EventData,
        rng: np.random.Generator,
        trainer: Optional[Trainer] = None
    ) -> bool:
        """
        Roll an event and apply its bonus if it triggers.

        Events with choices ask the trainer which one to take (the first
        choice when no trainer is given).

        Returns:
            True if the event triggered
        """
        roll = int(rng.integers(0, 100))
        if event.trigger_prob < 100 and roll >= event.trigger_prob:
            return False

        logger.info(f"+Event #{event.event_id} {event.name} [roll {roll}<{event.trigger_prob}]")
        self.events[event.event_id] = self.events.get(event.event_id, 0) + 1
        bonus = event.bonus
        if event.choices:
            selection = 0
            if trainer is not None:
                selection = check_selection(
                    trainer.select_choice(self, event.choices, rng), len(event.choices), "choice"
                )
            bonus = bonus.add(event.choices[selection])
        self.uma.apply_action(bonus)
        return True

    def apply_action(self, action: Action, rng: np.random.Generator) -> None:
        self.action_handlers.apply(action, self, rng)

    # -------------------------------------------------------------------------
    # Persons and distribution
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def persons(self) -> List[Person]:
        ...

    @abstractmethod
    def init_persons(self) -> None:
        ...

    @property
    @abstractmethod
    def distribution(self) -> List[List[int]]:
        ...

    @abstractmethod
    def absent_rate_drop(self) -> int:
        ...

    @abstractmethod
    def deyilv(self, person_index: int) -> float:
        """Specialty rate: extra weight for showing up at the person's own lane."""

    @abstractmethod
    def has_group_buff(self) -> bool:
        """Whether team cards shine this turn."""

    @abstractmethod
    def explain_distribution(self) -> str:
        ...

    def reset_distribution(self) -> None:
        dist.reset_distribution(self.distribution)

    def distribute_person(self, person_index: int, allow_absent: bool, rng: np.random.Generator) -> Optional[int]:
        """Place one already-registered person. None means not at training."""
        return dist.distribute_person(
            self.distribution, self.persons, person_index, allow_absent,
            self.absent_rate_drop(), self.deyilv(person_index), rng
        )

    def distribute_all(self, rng: np.random.Generator) -> None:
        dist.distribute_all(self.distribution, self.persons, self.absent_rate_drop(), self.deyilv, rng)

    def at_trains(self, person_index: int) -> List[bool]:
        return dist.at_trains(self.distribution, person_index)

    def is_shining_at(self, person_index: int, train: int) -> bool:
        """
        Whether the person triggers a friendship training at this lane.

        Support cards shine at their own lane with friendship >= 80, team
        cards while the group buff is on. Variants override this for
        scenario cards and NPCs.
        """
        person = self.persons[person_index]
        if person.person_type == PersonType.SUPPORT_CARD:
            return person.train_type == train and person.friendship >= SHINING_FRIENDSHIP
        if person.person_type == PersonType.TEAM_CARD:
            return self.has_group_buff()
        return False

    def shining_count(self, train: int) -> int:
        return sum(1 for index in self.distribution[train] if self.is_shining_at(index, train))

    # -------------------------------------------------------------------------
    # Training
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def constants(self) -> GameConstants:
        ...

    @abstractmethod
    def train_level(self, train: int) -> int:
        ...

    @property
    @abstractmethod
    def uma(self) -> Uma:
        ...

    @property
    @abstractmethod
    def deck(self) -> List[SupportCard]:
        ...

    def calc_training_buff(self, train: int) -> CardTrainingEffect:
        """Summed support card effect of everyone in a lane."""
        training.check_lane(train)
        occupants = self.distribution[train]
        shining = [self.is_shining_at(index, train) for index in occupants]
        return training.sum_card_effects(train, occupants, self.deck, shining)

    def calc_training_value(self, buffs: CardTrainingEffect, train: int) -> ActionValue:
        training.check_lane(train)
        return training.calc_training_value(
            self.constants, train, buffs, self.train_level(train), self.uma, self.distribution[train]
        )
