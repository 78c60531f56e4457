"""
Static Game Data.

Loads the numeric tables (base training values, names, ranks, action
effects, events) and the trainee/card definitions from career/data/.
The result is a read-only GameConstants object; call init_global() once
before the first simulation and pass the object to whatever needs it.
"""

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from career.errors import InvalidLaneError, RosterError
from career.state import (
    NUM_STATUS, NUM_TRAINS, ActionValue, EventData, InheritInfo, SupportCard, Uma
)


DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
CONSTANTS_FILE = "game_constants.json"
CARDS_FILE = "cards.json"


def _freeze(value: Any) -> Any:
    """Read-only view of parsed JSON: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True, eq=False)
class GameConstants:
    """
    Read-only game tables, shared by every simulation in the process.

    Compared and hashed by identity. Mapping fields are frozen into
    read-only proxies on construction, and copies return the same object.
    """
    training_basic_value: Tuple[Tuple[Tuple[int, ...], ...], ...]
    five_status_names: Tuple[str, ...]
    motivation_names: Tuple[str, ...]
    rank_table: Tuple[Tuple[int, str], ...]
    status_soft_cap: int = 1200
    status_limit: int = 2000
    action_effects: Mapping[str, Any] = field(default_factory=dict)
    events: Tuple[EventData, ...] = ()
    umas: Mapping[int, Mapping] = field(default_factory=dict)
    support_cards: Mapping[int, Mapping] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("action_effects", "umas", "support_cards"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __copy__(self) -> "GameConstants":
        return self

    def __deepcopy__(self, memo) -> "GameConstants":
        return self

    def max_train_level(self) -> int:
        return len(self.training_basic_value[0]) - 1

    def training_value(self, train: int, level: int) -> Tuple[int, ...]:
        """Base value row (6 stat slots + vitality) for a lane and facility level."""
        if train < 0 or train >= NUM_TRAINS:
            raise InvalidLaneError(f"invalid training lane: {train}")
        level = max(0, min(self.max_train_level(), level))
        return self.training_basic_value[train][level]

    def get_rank_name(self, score: int) -> str:
        name = self.rank_table[0][1]
        for threshold, rank in self.rank_table:
            if score >= threshold:
                name = rank
        return name

    def motivation_name(self, motivation: int) -> str:
        if 1 <= motivation <= len(self.motivation_names):
            return self.motivation_names[motivation - 1]
        return "invalid motivation"

    def explain_status(self, five_status: List[int]) -> str:
        return " ".join(f"{name}{value}" for name, value in zip(self.five_status_names, five_status))

    def get_card(self, card_id: int) -> SupportCard:
        if card_id not in self.support_cards:
            raise RosterError(f"unknown support card #{card_id}")
        return SupportCard.from_dict(card_id, self.support_cards[card_id])

    def get_uma(self, uma_id: int, inherit: InheritInfo) -> Uma:
        if uma_id not in self.umas:
            raise RosterError(f"unknown trainee #{uma_id}")
        return Uma.from_dict(uma_id, self.umas[uma_id], inherit, status_limit=self.status_limit)

    def events_at(self, turn: int) -> List[EventData]:
        return [e for e in self.events if turn in e.turns]


def _read_json(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_value_table(raw: List) -> Tuple[Tuple[Tuple[int, ...], ...], ...]:
    if len(raw) != NUM_TRAINS:
        raise ValueError(f"training_basic_value: expected {NUM_TRAINS} lanes, got {len(raw)}")
    table = []
    for train, levels in enumerate(raw):
        rows = []
        for row in levels:
            if len(row) != NUM_STATUS + 1:
                raise ValueError(f"training_basic_value[{train}]: rows need {NUM_STATUS + 1} values")
            rows.append(tuple(int(v) for v in row))
        table.append(tuple(rows))
    return tuple(table)


def load_game_constants(data_dir: Optional[str] = None) -> GameConstants:
    """
    Load game tables and card data from a data directory.

    Args:
        data_dir: Directory holding game_constants.json and cards.json.
            Defaults to the bundled career/data/.

    Returns:
        Frozen GameConstants
    """
    data_dir = data_dir or DATA_DIR
    consts = _read_json(os.path.join(data_dir, CONSTANTS_FILE))
    cards = _read_json(os.path.join(data_dir, CARDS_FILE))

    return GameConstants(
        training_basic_value=_parse_value_table(consts["training_basic_value"]),
        five_status_names=tuple(consts["five_status_names"]),
        motivation_names=tuple(consts["motivation_names"]),
        rank_table=tuple(sorted((int(t), str(n)) for t, n in consts["rank_table"])),
        status_soft_cap=int(consts.get("status_soft_cap", 1200)),
        status_limit=int(consts.get("status_limit", 2000)),
        action_effects=consts.get("action_effects", {}),
        events=tuple(EventData.from_dict(e) for e in consts.get("events", [])),
        umas={int(k): v for k, v in cards.get("umas", {}).items()},
        support_cards={int(k): v for k, v in cards.get("support_cards", {}).items()},
    )


_GAME_CONSTANTS: Optional[GameConstants] = None


def init_global(data_dir: Optional[str] = None) -> GameConstants:
    """Load the process-wide constants once. Later calls return the same object."""
    global _GAME_CONSTANTS
    if _GAME_CONSTANTS is None:
        _GAME_CONSTANTS = load_game_constants(data_dir)
    return _GAME_CONSTANTS


def get_constants() -> GameConstants:
    if _GAME_CONSTANTS is None:
        raise RuntimeError("game constants not initialized, call init_global() first")
    return _GAME_CONSTANTS


def action_value_from_effect(effect: Dict) -> ActionValue:
    """Build an ActionValue from an action_effects entry."""
    return ActionValue.from_dict({
        "status_pt": effect.get("status_pt", [0] * NUM_STATUS),
        "vital": effect.get("vital", 0),
    })
