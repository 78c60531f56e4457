"""
Basic (no scenario) career.

BaseGame holds the state every variant shares. BasicGame wraps one and
adds its own roster; it is the reference variant the contract is tested
against.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from career.actions import (
    Action, ActionHandlers, CLINIC, FRIEND_OUTING, NORMAL_OUTING, RACE, REST, base_actions
)
from career.distribution import empty_distribution, weighted_choice
from career.errors import RosterError
from career.game import Game, Trainer, check_selection
from career.gamedata import GameConstants, action_value_from_effect
from career.state import (
    DIRECTOR_INDEX, NUM_TRAINS, EventData, FriendOutState, FriendState, InheritInfo,
    Person, PersonType, SupportCard, TurnStage, Uma
)


logger = logging.getLogger(__name__)

MAX_TURN = 77
DECK_SIZE = 6
MAX_TRAIN_LEVEL = 5
RACE_TURN_BAND = (14, 71)     # inclusive
LATE_GAME_TURN = 72


@dataclass
class BaseGame:
    """Career state shared by all variants."""
    constants: GameConstants
    uma: Uma
    deck: List[SupportCard]
    turn: int = 0
    stage: TurnStage = TurnStage.BEGIN
    distribution: List[List[int]] = field(default_factory=empty_distribution)
    events: Dict[int, int] = field(default_factory=dict)
    train_level_count: List[int] = field(default_factory=lambda: [0] * NUM_TRAINS)
    friend: FriendState = field(default_factory=FriendState)
    absent_rate_drop: int = 0

    @classmethod
    def new(
        cls,
        constants: GameConstants,
        uma_id: int,
        deck_ids: Sequence[int],
        inherit: InheritInfo
    ) -> "BaseGame":
        if len(deck_ids) != DECK_SIZE:
            raise RosterError(f"deck needs {DECK_SIZE} cards, got {len(deck_ids)}")
        uma = constants.get_uma(uma_id, inherit)
        deck = [constants.get_card(card_id) for card_id in deck_ids]
        return cls(constants=constants, uma=uma, deck=deck)

    def train_level(self, train: int) -> int:
        return min(MAX_TRAIN_LEVEL, self.train_level_count[train] // 4 + 1)


class BasicActionHandlers(ActionHandlers):
    """Action effects of the basic career, driven by the action_effects table."""

    def do_train(self, game: "BasicGame", train: int, rng: np.random.Generator) -> None:
        effects = game.constants.action_effects
        vital_before = game.uma.vital
        buffs = game.calc_training_buff(train)
        value = game.calc_training_value(buffs, train)
        logger.info(f">> Train {train}: {value.status_pt} vital {value.vital:+d}")
        game.uma.apply_action(value)
        game.base.train_level_count[train] += 1

        gain = int(effects.get("train_friendship_gain", 7))
        for index in list(game.distribution[train]):
            if index >= len(game.deck):
                continue
            person = game.persons[index].with_friendship(game.persons[index].friendship + gain)
            game.replace_person(person)
            if person.person_type == PersonType.SUPPORT_CARD and person.train_type > 4:
                if game.friend.out_state == FriendOutState.LOCKED:
                    game.friend.out_state = FriendOutState.UNLOCKED
                    logger.info("Friend outing unlocked")
            elif person.person_type == PersonType.TEAM_CARD:
                if person.friendship >= int(effects.get("group_buff_friendship", 80)) and not game.has_group_buff():
                    game.friend.group_buff_turn = int(effects.get("group_buff_turns", 3))
                    logger.info("Team group buff armed")

        if vital_before < int(effects.get("ill_vital_threshold", 30)):
            if rng.random() < float(effects.get("ill_probability", 0.0)):
                game.uma.flags.ill = True
                logger.info("Trainee fell ill")

    def do_race(self, game: "BasicGame", rng: np.random.Generator) -> None:
        value = action_value_from_effect(game.constants.action_effects.get("race", {}))
        logger.info(f">> Race: {value.status_pt} vital {value.vital:+d}")
        game.uma.apply_action(value)

    def do_rest(self, game: "BasicGame", rng: np.random.Generator) -> None:
        effect = game.constants.action_effects.get("rest", {})
        choices = effect.get("vital_choices", [50])
        weights = effect.get("vital_weights", [1] * len(choices))
        vital = int(choices[weighted_choice(rng, weights)])
        logger.info(f">> Rest: vital +{vital}")
        game.uma.vital = min(game.uma.max_vital, game.uma.vital + vital)

    def do_friend_outing(self, game: "BasicGame", rng: np.random.Generator) -> None:
        effect = game.constants.action_effects.get("friend_outing", {})
        used = game.friend.out_used
        slot = used.index(False)
        used[slot] = True
        logger.info(f">> Friend outing #{slot + 1}")
        game.uma.add_motivation(int(effect.get("motivation", 1)))
        game.uma.apply_action(action_value_from_effect(effect))

    def do_normal_outing(self, game: "BasicGame", rng: np.random.Generator) -> None:
        effect = game.constants.action_effects.get("normal_outing", {})
        logger.info(">> Outing")
        game.uma.add_motivation(int(effect.get("motivation", 1)))
        game.uma.apply_action(action_value_from_effect(effect))

    def do_clinic(self, game: "BasicGame", rng: np.random.Generator) -> None:
        effect = game.constants.action_effects.get("clinic", {})
        logger.info(">> Clinic")
        game.uma.flags.ill = False
        game.uma.apply_action(action_value_from_effect(effect))


class BasicGame(Game):
    """Reference variant: a base career plus its own roster."""

    action_handlers = BasicActionHandlers()

    def __init__(self, base: BaseGame, persons: List[Person] = None):
        self.base = base
        self._persons: List[Person] = persons if persons is not None else []

    @classmethod
    def new_game(
        cls,
        constants: GameConstants,
        uma_id: int,
        deck_ids: Sequence[int],
        inherit: InheritInfo = None
    ) -> "BasicGame":
        game = cls(BaseGame.new(constants, uma_id, deck_ids, inherit or InheritInfo()))
        game.init_persons()
        return game

    # -------------------------------------------------------------------------
    # Forwarded base state
    # -------------------------------------------------------------------------

    @property
    def constants(self) -> GameConstants:
        return self.base.constants

    @property
    def uma(self) -> Uma:
        return self.base.uma

    @property
    def deck(self) -> List[SupportCard]:
        return self.base.deck

    @property
    def stage(self) -> TurnStage:
        return self.base.stage

    @property
    def distribution(self) -> List[List[int]]:
        return self.base.distribution

    @property
    def events(self) -> Dict[int, int]:
        return self.base.events

    @property
    def friend(self) -> FriendState:
        return self.base.friend

    @property
    def persons(self) -> List[Person]:
        return self._persons

    def turn(self) -> int:
        return self.base.turn

    def max_turn(self) -> int:
        return MAX_TURN

    def absent_rate_drop(self) -> int:
        return self.base.absent_rate_drop

    def train_level(self, train: int) -> int:
        return self.base.train_level(train)

    def has_group_buff(self) -> bool:
        return self.base.friend.group_buff_turn > 0

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    def add_person(self, person: Person) -> Person:
        """Append a person; its index becomes its roster position."""
        person = Person(
            person_type=person.person_type,
            train_type=person.train_type,
            friendship=person.friendship,
            person_index=len(self._persons),
            name=person.name,
        )
        logger.info(f"New training person: {person.explain()} #{person.person_index}")
        self._persons.append(person)
        return person

    def replace_person(self, person: Person) -> None:
        index = person.person_index
        if not 0 <= index < len(self._persons):
            raise RosterError(f"no person #{index} in roster")
        self._persons[index] = person

    def init_persons(self) -> None:
        for card in self.deck:
            self.add_person(Person.from_card(card))
        director = self.add_person(Person.director())
        if director.person_index != DIRECTOR_INDEX:
            raise RosterError(f"director landed at #{director.person_index}, expected #{DIRECTOR_INDEX}")

    def deyilv(self, person_index: int) -> float:
        if person_index < len(self.deck):
            return self.deck[person_index].effect.specialty_rate
        return 0.0

    # -------------------------------------------------------------------------
    # Turn flow
    # -------------------------------------------------------------------------

    def is_race_turn(self) -> bool:
        return self.uma.is_race_turn(self.turn())

    def is_summer_camp(self) -> bool:
        turn = self.turn()
        return 36 <= turn < 40 or 60 <= turn < 64

    def advance_stage(self) -> bool:
        stage = self.base.stage.next_stage()
        if stage is not None:
            self.base.stage = stage
        elif self.base.turn < self.max_turn():
            self.base.turn += 1
            self.base.stage = TurnStage.BEGIN
        else:
            return False
        return True

    def list_actions(self) -> List[Action]:
        if self.is_race_turn():
            return base_actions(True)

        actions = base_actions(False)
        turn = self.turn()
        if self.is_summer_camp():
            actions += [RACE, NORMAL_OUTING]
            return actions

        actions += [REST, NORMAL_OUTING]
        if RACE_TURN_BAND[0] <= turn <= RACE_TURN_BAND[1]:
            actions.append(RACE)
        if self.uma.flags.ill:
            actions.append(CLINIC)
        if (self.friend.out_state == FriendOutState.UNLOCKED and turn < LATE_GAME_TURN
                and not self.friend.all_outings_used()):
            actions.append(FRIEND_OUTING)
        return actions

    def list_events(self) -> List[EventData]:
        return self.constants.events_at(self.turn())

    def run_stage(self, trainer: Trainer, rng: np.random.Generator) -> None:
        logger.info(f"-- Turn {self.turn()}-{self.stage.value} --")
        if self.stage == TurnStage.BEGIN:
            for event in self.list_events():
                self.apply_event(event, rng, trainer)
        elif self.stage == TurnStage.DISTRIBUTE:
            if self.is_race_turn():
                self.reset_distribution()
            else:
                self.distribute_all(rng)
                logger.debug(f"Distribution:\n{self.explain_distribution()}")
        elif self.stage == TurnStage.TRAIN:
            actions = self.list_actions()
            selection = check_selection(trainer.select_action(self, actions, rng), len(actions), "action")
            logger.info(f"Trainer picked {actions[selection]}")
            self.apply_action(actions[selection], rng)
        elif self.stage == TurnStage.END:
            if self.base.friend.group_buff_turn > 0:
                self.base.friend.group_buff_turn -= 1

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def explain_distribution(self) -> str:
        headers = list(self.constants.five_status_names)
        width = 16
        lines = [" | ".join(h.ljust(width) for h in headers)]
        lines.append("-+-".join("-" * width for _ in headers))
        depth = max((len(lane) for lane in self.distribution), default=0)
        for row in range(depth):
            cells = []
            for train in range(NUM_TRAINS):
                lane = self.distribution[train]
                text = ""
                if row < len(lane):
                    text = self.persons[lane[row]].explain()
                    if self.is_shining_at(lane[row], train):
                        text += "*"
                cells.append(text[:width].ljust(width))
            lines.append(" | ".join(cells))
        return "\n".join(lines)

    def explain(self) -> str:
        uma = self.uma
        score = uma.calc_score(self.constants.status_soft_cap)
        return (
            f"Turn {self.turn()} | {self.constants.explain_status(uma.five_status)} {uma.skill_pt}pt | "
            f"vital {uma.vital}/{uma.max_vital} | "
            f"{self.constants.motivation_name(uma.motivation)} | "
            f"score {score} ({self.constants.get_rank_name(score)})"
        )
