"""
Tests for the game contract, exercised through the basic career.
"""

import copy

import numpy as np
import pytest

from career.actions import (
    CLINIC, FRIEND_OUTING, NORMAL_OUTING, RACE, REST, TRAIN_ACTIONS,
    Action, ActionHandlers, ActionKind
)
from career.basic import BasicGame, MAX_TURN
from career.errors import InvalidLaneError, RosterError, TrainerError
from career.game import Trainer
from career.runner import DEFAULT_SCENARIO, new_game
from career.state import (
    DIRECTOR_INDEX, ActionValue, EventData, FriendOutState, PersonType, TurnStage
)
from tests.doubles import RiggedRng


class FirstTrainer(Trainer):
    """Always takes the first offered action."""

    def select_action(self, game, actions, rng):
        return 0


class FixedTrainer(Trainer):
    def __init__(self, action_pick=0, choice_pick=0):
        self.action_pick = action_pick
        self.choice_pick = choice_pick

    def select_action(self, game, actions, rng):
        return self.action_pick

    def select_choice(self, game, choices, rng):
        return self.choice_pick


def at_turn(game, turn, stage=TurnStage.TRAIN):
    game.base.turn = turn
    game.base.stage = stage
    return game


def fill_lane(game, train, indices):
    game.reset_distribution()
    game.distribution[train].extend(indices)


# =============================================================================
# Roster
# =============================================================================

class TestRoster:
    """Person registration at career start."""

    def test_indices_match_positions(self, game):
        assert [p.person_index for p in game.persons] == list(range(len(game.persons)))

    def test_deck_then_director(self, game):
        assert len(game.persons) == 7
        assert game.persons[DIRECTOR_INDEX].person_type == PersonType.DIRECTOR
        assert [p.person_type for p in game.persons[:6]] == [PersonType.SUPPORT_CARD] * 6

    def test_card_friendship_copied(self, game):
        assert game.persons[0].friendship == game.deck[0].initial_friendship

    def test_inherit_added_to_stats(self, constants, game):
        base = constants.umas[DEFAULT_SCENARIO["uma_id"]]["five_status"]
        assert game.uma.five_status[0] == base[0] + 15
        assert game.uma.five_status[4] == base[4] + 30

    def test_short_deck_rejected(self, constants):
        with pytest.raises(RosterError):
            new_game(constants, {"deck": [302424, 302464]})

    def test_unknown_card_rejected(self, constants):
        with pytest.raises(RosterError):
            new_game(constants, {"deck": [302424, 302464, 302484, 302564, 302574, 1]})

    def test_unknown_uma_rejected(self, constants):
        with pytest.raises(RosterError):
            new_game(constants, {"uma_id": 1})

    def test_malformed_inherit_rejected(self, constants):
        with pytest.raises(RosterError):
            new_game(constants, {"inherit": {"blue_count": [1, 2]}})

    def test_replace_unknown_person(self, game):
        person = game.persons[0]
        with pytest.raises(RosterError):
            game.replace_person(type(person)(PersonType.NPC, person_index=40))


# =============================================================================
# Stages and termination
# =============================================================================

class CountingGame(BasicGame):
    """Basic career recording advance_stage results."""

    def __init__(self, base, persons=None):
        super().__init__(base, persons)
        self.advances = []

    def advance_stage(self):
        result = super().advance_stage()
        self.advances.append(result)
        return result


class TestStages:
    """Turn and stage progression."""

    def test_stage_order(self):
        assert TurnStage.BEGIN.next_stage() == TurnStage.DISTRIBUTE
        assert TurnStage.DISTRIBUTE.next_stage() == TurnStage.TRAIN
        assert TurnStage.TRAIN.next_stage() == TurnStage.END
        assert TurnStage.END.next_stage() is None

    def test_end_stage_moves_to_next_turn(self, game):
        at_turn(game, 5, TurnStage.END)
        assert game.advance_stage() is True
        assert game.turn() == 6
        assert game.stage == TurnStage.BEGIN

    def test_last_stage_of_last_turn(self, game):
        at_turn(game, MAX_TURN, TurnStage.END)
        assert game.advance_stage() is False
        assert game.turn() == MAX_TURN

    def test_run_to_completion_terminates(self, constants, game):
        counting = CountingGame(game.base, game.persons)
        counting.run_to_completion(FirstTrainer(), np.random.default_rng(5))

        assert counting.turn() == counting.max_turn()
        assert counting.advances.count(False) == 1
        assert counting.advances[-1] is False
        assert counting.advances.count(True) == 4 * (MAX_TURN + 1) - 1

    def test_out_of_range_selection(self, game, rng):
        at_turn(game, 20)
        with pytest.raises(TrainerError):
            game.run_stage(FixedTrainer(action_pick=len(game.list_actions())), rng)

    def test_negative_selection(self, game, rng):
        at_turn(game, 20)
        with pytest.raises(TrainerError):
            game.run_stage(FixedTrainer(action_pick=-1), rng)

    def test_end_stage_counts_down_group_buff(self, game, rng):
        game.friend.group_buff_turn = 2
        at_turn(game, 20, TurnStage.END)
        game.run_stage(FirstTrainer(), rng)
        assert game.friend.group_buff_turn == 1


# =============================================================================
# Action listing
# =============================================================================

class TestListActions:
    """Legal actions per turn."""

    def test_race_turn_only_race(self, game):
        at_turn(game, 11)
        assert game.list_actions() == [RACE]
        assert game.list_actions() == [RACE]

    def test_race_turn_empty_distribution(self, game, rng):
        fill_lane(game, 0, [0, 1, 2])
        at_turn(game, 11, TurnStage.DISTRIBUTE)
        game.run_stage(FirstTrainer(), rng)
        assert game.distribution == [[], [], [], [], []]
        game.run_stage(FirstTrainer(), rng)
        assert game.distribution == [[], [], [], [], []]

    def test_summer_camp(self, game):
        at_turn(game, 37)
        assert game.list_actions() == list(TRAIN_ACTIONS) + [RACE, NORMAL_OUTING]

    def test_early_turn(self, game):
        at_turn(game, 5)
        assert game.list_actions() == list(TRAIN_ACTIONS) + [REST, NORMAL_OUTING]

    def test_race_band(self, game):
        at_turn(game, 20)
        assert RACE in game.list_actions()
        at_turn(game, 72)
        assert RACE not in game.list_actions()

    def test_clinic_only_when_ill(self, game):
        at_turn(game, 20)
        assert CLINIC not in game.list_actions()
        game.uma.flags.ill = True
        assert CLINIC in game.list_actions()

    def test_friend_outing_rules(self, game):
        at_turn(game, 20)
        assert FRIEND_OUTING not in game.list_actions()

        game.friend.out_state = FriendOutState.UNLOCKED
        assert FRIEND_OUTING in game.list_actions()

        at_turn(game, 72)
        assert FRIEND_OUTING not in game.list_actions()

        at_turn(game, 20)
        game.friend.out_used = [True] * 5
        assert FRIEND_OUTING not in game.list_actions()

    @pytest.mark.parametrize("turn", [5, 11, 20, 37, 70])
    def test_listed_actions_apply(self, game, turn):
        game.uma.flags.ill = True
        game.friend.out_state = FriendOutState.UNLOCKED
        at_turn(game, turn)
        for action in game.list_actions():
            game_copy = copy.deepcopy(game)
            game_copy.apply_action(action, np.random.default_rng(0))


# =============================================================================
# Action effects
# =============================================================================

class TestActionEffects:
    """Basic career action handlers."""

    def test_dispatch_table_is_exhaustive(self):
        assert set(ActionHandlers().dispatch_table()) == set(ActionKind)

    def test_train_action_rejects_bad_lane(self):
        with pytest.raises(InvalidLaneError):
            Action.train_at(5)

    def test_base_handlers_change_nothing(self, game, rng):
        before = copy.deepcopy(game.uma)
        handlers = ActionHandlers()
        for action in list(TRAIN_ACTIONS) + [RACE, REST, FRIEND_OUTING, NORMAL_OUTING, CLINIC]:
            handlers.apply(action, game, rng)
        assert game.uma == before

    def test_train(self, game, rng):
        fill_lane(game, 0, [0, 5])
        speed = game.uma.five_status[0]
        friendship = game.persons[0].friendship

        game.apply_action(Action.train_at(0), rng)

        assert game.uma.five_status[0] > speed
        assert game.base.train_level_count[0] == 1
        assert game.persons[0].friendship == friendship + 7
        assert game.friend.out_state == FriendOutState.UNLOCKED

    def test_train_levels_up_every_four(self, game, rng):
        for _ in range(4):
            game.reset_distribution()
            game.apply_action(Action.train_at(1), rng)
        assert game.train_level(1) == 2
        assert game.train_level(0) == 1

    def test_tired_training_can_cause_illness(self, game):
        game.uma.vital = 10
        game.reset_distribution()
        game.apply_action(Action.train_at(0), RiggedRng([0], uniform=0.0))
        assert game.uma.flags.ill

    def test_race(self, game, rng):
        skill = game.uma.skill_pt
        game.apply_action(RACE, rng)
        assert game.uma.skill_pt == skill + 35
        assert game.uma.vital == 85

    def test_rest(self, game, rng):
        game.uma.vital = 10
        game.apply_action(REST, rng)
        assert game.uma.vital in (40, 60, 80)

    def test_rest_caps_vitality(self, game, rng):
        game.uma.vital = 90
        game.apply_action(REST, rng)
        assert game.uma.vital == game.uma.max_vital

    def test_normal_outing(self, game, rng):
        game.apply_action(NORMAL_OUTING, rng)
        assert game.uma.motivation == 4

    def test_friend_outing_uses_a_slot(self, game, rng):
        game.friend.out_state = FriendOutState.UNLOCKED
        game.apply_action(FRIEND_OUTING, rng)
        assert game.friend.out_used == [True, False, False, False, False]

    def test_clinic(self, game, rng):
        game.uma.flags.ill = True
        game.apply_action(CLINIC, rng)
        assert not game.uma.flags.ill


# =============================================================================
# Events
# =============================================================================

class TestEvents:
    """Event rolls and choices."""

    def test_certain_event(self, game, rng):
        event = EventData(event_id=9, name="test", trigger_prob=100,
                          bonus=ActionValue(status_pt=[0, 0, 0, 0, 0, 10]))
        skill = game.uma.skill_pt
        assert game.apply_event(event, rng)
        assert game.events[9] == 1
        assert game.uma.skill_pt == skill + 10

    def test_impossible_event(self, game, rng):
        event = EventData(event_id=9, name="test", trigger_prob=0)
        assert not game.apply_event(event, rng)
        assert 9 not in game.events

    def test_roll_against_probability(self, game):
        event = EventData(event_id=9, name="test", trigger_prob=40)
        assert game.apply_event(event, RiggedRng([0], integer=39))
        assert not game.apply_event(event, RiggedRng([0], integer=40))

    def test_trainer_picks_choice(self, game, rng):
        event = EventData(event_id=9, name="test", choices=[
            ActionValue(), ActionValue(status_pt=[0, 0, 0, 0, 0, 50]),
        ])
        skill = game.uma.skill_pt
        game.apply_event(event, rng, FixedTrainer(choice_pick=1))
        assert game.uma.skill_pt == skill + 50

    def test_bad_choice_rejected(self, game, rng):
        event = EventData(event_id=9, name="test", choices=[ActionValue()])
        with pytest.raises(TrainerError):
            game.apply_event(event, rng, FixedTrainer(choice_pick=3))

    def test_scripted_events_listed(self, game):
        at_turn(game, 24)
        assert [e.event_id for e in game.list_events()] == [1001]


# =============================================================================
# Shining and distribution
# =============================================================================

class TestShining:
    """Friendship training triggers."""

    def test_card_shines_at_own_lane(self, game):
        game.replace_person(game.persons[0].with_friendship(80))
        assert game.is_shining_at(0, 0)
        assert not game.is_shining_at(0, 1)

    def test_low_friendship_does_not_shine(self, game):
        game.replace_person(game.persons[0].with_friendship(79))
        assert not game.is_shining_at(0, 0)

    def test_director_never_shines(self, game):
        assert not game.is_shining_at(DIRECTOR_INDEX, 0)

    def test_team_card_shines_with_group_buff(self, constants):
        game = new_game(constants, {"deck": [302424, 302464, 302484, 302564, 302574, 302704]})
        assert not game.is_shining_at(5, 0)
        game.friend.group_buff_turn = 1
        assert game.is_shining_at(5, 0)

    def test_shining_count_and_buff(self, game):
        game.replace_person(game.persons[0].with_friendship(100))
        fill_lane(game, 0, [0, 1])
        assert game.shining_count(0) == 1
        buffs = game.calc_training_buff(0)
        assert buffs.friendship_bonus == game.deck[0].effect.friendship_bonus

    def test_buff_without_shining(self, game):
        fill_lane(game, 0, [0, 1])
        assert game.calc_training_buff(0).friendship_bonus == 0

    def test_buff_rejects_bad_lane(self, game):
        with pytest.raises(InvalidLaneError):
            game.calc_training_buff(5)


class TestGameDistribution:
    """Distribution through the game API."""

    @pytest.mark.parametrize("seed", range(10))
    def test_distribute_all(self, game, seed):
        game.distribute_all(np.random.default_rng(seed))
        assert len(game.distribution) == 5
        for lane in game.distribution:
            assert len(lane) <= 5
            assert sum(1 for i in lane if game.persons[i].is_friend()) <= 1
        for i in range(len(game.persons)):
            assert game.at_trains(i).count(True) <= 1

    def test_distribute_person_without_absence(self, game, rng):
        game.reset_distribution()
        lane = game.distribute_person(0, False, rng)
        assert lane is not None
        assert game.at_trains(0)[lane]

    def test_explain_distribution(self, game, rng):
        game.distribute_all(rng)
        text = game.explain_distribution()
        assert text.splitlines()[0].startswith("Speed")
