"""
Career State Containers.

Plain dataclasses for the values a career simulation passes around:
stat deltas, support card effects, training persons, the trainee and the
per-career bookkeeping shared by every game variant.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Any, Optional

from career.errors import RosterError


NUM_TRAINS = 5           # speed, stamina, power, guts, wit
NUM_STATUS = 6           # five stats + skill points
MAX_LANE_SIZE = 5
MAX_MOTIVATION = 5
MIN_MOTIVATION = 1

# Fixed roster slots for the two non-trainable NPCs
DIRECTOR_INDEX = 6
REPORTER_INDEX = 7
RESERVED_PERSON_INDICES = (DIRECTOR_INDEX, REPORTER_INDEX)


class PersonType(Enum):
    """Category of a training person."""
    SUPPORT_CARD = "support_card"
    TEAM_CARD = "team_card"
    SCENARIO_CARD = "scenario_card"
    NPC = "npc"
    REPORTER = "reporter"
    DIRECTOR = "director"


class TurnStage(Enum):
    """Stages of one turn, in the order they run."""
    BEGIN = "begin"
    DISTRIBUTE = "distribute"
    TRAIN = "train"
    END = "end"

    def next_stage(self) -> Optional["TurnStage"]:
        """Next stage within the same turn, or None after the last one."""
        stages = list(TurnStage)
        idx = stages.index(self)
        if idx + 1 < len(stages):
            return stages[idx + 1]
        return None


class FriendOutState(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


def _int_list(values: Any, size: int, what: str) -> List[int]:
    values = list(values if values is not None else [0] * size)
    if len(values) != size:
        raise RosterError(f"{what}: expected {size} values, got {len(values)}")
    return [int(v) for v in values]


@dataclass
class ActionValue:
    """Stat delta: five stats + skill points, plus vitality."""
    status_pt: List[int] = field(default_factory=lambda: [0] * NUM_STATUS)
    vital: int = 0

    def add(self, other: "ActionValue") -> "ActionValue":
        return ActionValue(
            status_pt=[a + b for a, b in zip(self.status_pt, other.status_pt)],
            vital=self.vital + other.vital,
        )

    def is_zero(self) -> bool:
        return self.vital == 0 and all(v == 0 for v in self.status_pt)

    def to_dict(self) -> Dict:
        return {"status_pt": list(self.status_pt), "vital": self.vital}

    @classmethod
    def from_dict(cls, d: Dict) -> "ActionValue":
        return cls(
            status_pt=_int_list(d.get("status_pt"), NUM_STATUS, "status_pt"),
            vital=int(d.get("vital", 0)),
        )


@dataclass
class CardTrainingEffect:
    """
    Training bonus of one support card, or the sum over a lane.

    Percentages are plain numbers (10 means +10%). friendship_bonus only
    counts when the contributing card is shining at the lane.
    """
    friendship_bonus: float = 0.0
    motivation_bonus: float = 0.0
    training_bonus: float = 0.0
    vital_cost_drop: float = 0.0
    wiz_vital_bonus: int = 0
    specialty_rate: float = 0.0
    stat_bonus: List[int] = field(default_factory=lambda: [0] * NUM_STATUS)

    def add(self, other: "CardTrainingEffect") -> "CardTrainingEffect":
        """Elementwise sum of two effects."""
        return CardTrainingEffect(
            friendship_bonus=self.friendship_bonus + other.friendship_bonus,
            motivation_bonus=self.motivation_bonus + other.motivation_bonus,
            training_bonus=self.training_bonus + other.training_bonus,
            vital_cost_drop=self.vital_cost_drop + other.vital_cost_drop,
            wiz_vital_bonus=self.wiz_vital_bonus + other.wiz_vital_bonus,
            specialty_rate=self.specialty_rate + other.specialty_rate,
            stat_bonus=[a + b for a, b in zip(self.stat_bonus, other.stat_bonus)],
        )

    @classmethod
    def from_dict(cls, d: Dict) -> "CardTrainingEffect":
        return cls(
            friendship_bonus=float(d.get("friendship_bonus", 0.0)),
            motivation_bonus=float(d.get("motivation_bonus", 0.0)),
            training_bonus=float(d.get("training_bonus", 0.0)),
            vital_cost_drop=float(d.get("vital_cost_drop", 0.0)),
            wiz_vital_bonus=int(d.get("wiz_vital_bonus", 0)),
            specialty_rate=float(d.get("specialty_rate", 0.0)),
            stat_bonus=_int_list(d.get("stat_bonus"), NUM_STATUS, "stat_bonus"),
        )


@dataclass
class SupportCard:
    """A deck card as loaded from card data."""
    card_id: int
    name: str
    person_type: PersonType = PersonType.SUPPORT_CARD
    train_type: int = 0
    initial_friendship: int = 0
    effect: CardTrainingEffect = field(default_factory=CardTrainingEffect)

    @classmethod
    def from_dict(cls, card_id: int, d: Dict) -> "SupportCard":
        try:
            person_type = PersonType(d.get("type", "support_card"))
        except ValueError:
            raise RosterError(f"card #{card_id}: unknown type {d.get('type')!r}")
        if person_type not in (PersonType.SUPPORT_CARD, PersonType.TEAM_CARD, PersonType.SCENARIO_CARD):
            raise RosterError(f"card #{card_id}: {person_type.value} cannot be a deck card")
        train_type = int(d.get("train_type", 0))
        if train_type < 0:
            raise RosterError(f"card #{card_id}: negative train_type {train_type}")
        return cls(
            card_id=card_id,
            name=d.get("name", f"Card {card_id}"),
            person_type=person_type,
            train_type=train_type,
            initial_friendship=int(d.get("initial_friendship", 0)),
            effect=CardTrainingEffect.from_dict(d.get("effect", {})),
        )


@dataclass(frozen=True)
class Person:
    """
    A person that can show up at training.

    train_type 0-4 is the lane the person prefers; 5 or more means no
    training affinity (friend, team and NPC cards).
    """
    person_type: PersonType
    train_type: int = 5
    friendship: int = 0
    person_index: int = -1
    name: str = ""

    def is_friend(self) -> bool:
        """Friend-classified persons share a lane with no other friend."""
        return self.train_type > 4 or self.person_type in (PersonType.REPORTER, PersonType.DIRECTOR)

    def with_friendship(self, friendship: int) -> "Person":
        return replace(self, friendship=min(100, friendship))

    def explain(self) -> str:
        label = self.name or self.person_type.value
        if self.person_type in (PersonType.SUPPORT_CARD, PersonType.TEAM_CARD, PersonType.SCENARIO_CARD):
            return f"{label}({self.friendship})"
        return label

    @classmethod
    def from_card(cls, card: SupportCard) -> "Person":
        return cls(
            person_type=card.person_type,
            train_type=card.train_type,
            friendship=card.initial_friendship,
            name=card.name,
        )

    @classmethod
    def director(cls) -> "Person":
        return cls(person_type=PersonType.DIRECTOR, train_type=6, name="Director")

    @classmethod
    def reporter(cls) -> "Person":
        return cls(person_type=PersonType.REPORTER, train_type=6, name="Reporter")


@dataclass
class InheritInfo:
    """Inheritance descriptor: starting stat stars and flat extras."""
    blue_count: List[int] = field(default_factory=lambda: [0] * NUM_TRAINS)
    extra_count: List[int] = field(default_factory=lambda: [0] * NUM_STATUS)

    def __post_init__(self):
        self.blue_count = _int_list(self.blue_count, NUM_TRAINS, "blue_count")
        self.extra_count = _int_list(self.extra_count, NUM_STATUS, "extra_count")

    @classmethod
    def from_dict(cls, d: Dict) -> "InheritInfo":
        return cls(blue_count=d.get("blue_count"), extra_count=d.get("extra_count"))


@dataclass
class UmaFlags:
    ill: bool = False


@dataclass
class Uma:
    """The trainee whose stats the career grows."""
    uma_id: int = 0
    name: str = "Trainee"
    five_status: List[int] = field(default_factory=lambda: [100] * NUM_TRAINS)
    five_status_bonus: List[int] = field(default_factory=lambda: [0] * NUM_STATUS)
    skill_pt: int = 120
    motivation: int = 3
    vital: int = 100
    max_vital: int = 100
    status_limit: int = 2000
    race_turns: List[int] = field(default_factory=list)
    flags: UmaFlags = field(default_factory=UmaFlags)

    @classmethod
    def from_dict(cls, uma_id: int, d: Dict, inherit: InheritInfo, status_limit: int = 2000) -> "Uma":
        five_status = _int_list(d.get("five_status"), NUM_TRAINS, f"uma #{uma_id} five_status")
        for i in range(NUM_TRAINS):
            five_status[i] += inherit.blue_count[i] + inherit.extra_count[i]
        bonus = list(d.get("five_status_bonus", [0] * NUM_TRAINS))
        if len(bonus) == NUM_TRAINS:
            bonus.append(0)
        return cls(
            uma_id=uma_id,
            name=d.get("name", f"Uma {uma_id}"),
            five_status=five_status,
            five_status_bonus=_int_list(bonus, NUM_STATUS, f"uma #{uma_id} five_status_bonus"),
            skill_pt=int(d.get("skill_pt", 120)) + inherit.extra_count[5],
            motivation=int(d.get("motivation", 3)),
            race_turns=[int(t) for t in d.get("race_turns", [])],
            status_limit=status_limit,
        )

    def is_race_turn(self, turn: int) -> bool:
        return turn in self.race_turns

    def apply_action(self, value: ActionValue) -> None:
        """Add a stat delta, keeping stats and vitality in range."""
        for i in range(NUM_TRAINS):
            self.five_status[i] = max(1, min(self.status_limit, self.five_status[i] + value.status_pt[i]))
        self.skill_pt = max(0, self.skill_pt + value.status_pt[5])
        self.vital = max(0, min(self.max_vital, self.vital + value.vital))

    def add_motivation(self, delta: int) -> None:
        self.motivation = max(MIN_MOTIVATION, min(MAX_MOTIVATION, self.motivation + delta))

    def calc_score(self, soft_cap: int = 1200) -> int:
        """Stats past the soft cap count half; skill points count half."""
        total = 0
        for stat in self.five_status:
            if stat > soft_cap:
                stat = soft_cap + (stat - soft_cap) // 2
            total += stat
        return total + self.skill_pt // 2


@dataclass
class FriendState:
    """Friend-card outing unlock and team-card group buff."""
    out_state: FriendOutState = FriendOutState.LOCKED
    out_used: List[bool] = field(default_factory=lambda: [False] * 5)
    group_buff_turn: int = 0

    def all_outings_used(self) -> bool:
        return all(self.out_used)


@dataclass
class EventData:
    """Scripted event: triggers with trigger_prob% on its turns."""
    event_id: int
    name: str
    trigger_prob: int = 100
    turns: List[int] = field(default_factory=list)
    bonus: ActionValue = field(default_factory=ActionValue)
    choices: List[ActionValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict) -> "EventData":
        return cls(
            event_id=int(d["id"]),
            name=d.get("name", f"Event {d['id']}"),
            trigger_prob=int(d.get("trigger_prob", 100)),
            turns=[int(t) for t in d.get("turns", [])],
            bonus=ActionValue.from_dict(d.get("bonus", {})),
            choices=[ActionValue.from_dict(c) for c in d.get("choices", [])],
        )
