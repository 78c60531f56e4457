"""
Tests for the training value calculation.
"""

import pytest

from career import training
from career.errors import InvalidLaneError
from career.state import ActionValue, CardTrainingEffect, SupportCard, Uma


def plain_uma(**kwargs):
    kwargs.setdefault("motivation", 3)
    return Uma(five_status_bonus=[0] * 6, **kwargs)


def value(constants, train=0, buffs=None, level=0, uma=None, occupants=()):
    return training.calc_training_value(
        constants, train, buffs or CardTrainingEffect(), level, uma or plain_uma(), list(occupants)
    )


class TestBaseValue:
    """No helpers, normal motivation, no bonuses."""

    @pytest.mark.parametrize("train", range(5))
    def test_equals_base_row(self, constants, train):
        base = constants.training_value(train, 0)
        result = value(constants, train)
        assert result.status_pt == [v if v > 0 else 0 for v in base[:6]]
        assert result.vital == base[6]

    def test_speed_lane(self, constants):
        result = value(constants, 0)
        assert result == ActionValue(status_pt=[10, 0, 5, 0, 0, 2], vital=-21)

    def test_deterministic(self, constants):
        buffs = CardTrainingEffect(friendship_bonus=25, training_bonus=15, motivation_bonus=30)
        uma = plain_uma(motivation=5)
        assert value(constants, 2, buffs, 3, uma, [0, 1]) == value(constants, 2, buffs, 3, uma, [0, 1])

    def test_level_above_table_is_clamped(self, constants):
        assert value(constants, 0, level=99) == value(constants, 0, level=constants.max_train_level())


class TestMultipliers:
    """Each factor scales stat slots; the product is floored."""

    def test_fraction_is_floored(self, constants):
        # 10 * 1.29 = 12.9
        result = value(constants, 0, CardTrainingEffect(training_bonus=29))
        assert result.status_pt[0] == 12
        assert result.status_pt[2] == 6
        assert result.status_pt[5] == 2

    def test_good_motivation(self, constants):
        assert value(constants, 0, uma=plain_uma(motivation=5)).status_pt[0] == 12

    def test_motivation_bonus_scales_motivation(self, constants):
        buffs = CardTrainingEffect(motivation_bonus=50)
        assert value(constants, 0, buffs, uma=plain_uma(motivation=5)).status_pt[0] == 13

    def test_bad_motivation_lowers_value(self, constants):
        assert value(constants, 0, uma=plain_uma(motivation=1)).status_pt[0] == 8

    def test_growth_bonus(self, constants):
        uma = Uma(five_status_bonus=[10, 0, 0, 0, 0, 0])
        result = value(constants, 0, uma=uma)
        assert result.status_pt[0] == 11
        assert result.status_pt[2] == 5

    def test_flat_stat_bonus(self, constants):
        buffs = CardTrainingEffect(stat_bonus=[2, 0, 0, 0, 0, 0])
        assert value(constants, 0, buffs).status_pt[0] == 12

    def test_flat_bonus_ignored_on_zero_slot(self, constants):
        buffs = CardTrainingEffect(stat_bonus=[0, 3, 0, 0, 0, 0])
        assert value(constants, 0, buffs).status_pt[1] == 0

    def test_headcount_excludes_director_and_reporter(self, constants):
        # three counted persons at level 5: 14 * 1.10
        assert value(constants, 0, level=5, occupants=[0, 1, 2, 6, 7]).status_pt[0] == 15

    def test_single_person_has_no_headcount_bonus(self, constants):
        assert value(constants, 0, occupants=[3]).status_pt[0] == 10


class TestVitality:
    """Vitality cost and the wit lane bonus."""

    def test_cost_drop_truncates(self, constants):
        # power lane costs 20; a 25% drop leaves 15
        result = value(constants, 2, CardTrainingEffect(vital_cost_drop=25))
        assert result.vital == -15

    def test_cost_drop_rounds_toward_zero(self, constants):
        # -21 * 0.75 = -15.75
        assert value(constants, 0, CardTrainingEffect(vital_cost_drop=25)).vital == -15

    def test_wit_lane_bonus(self, constants):
        assert value(constants, 4, CardTrainingEffect(wiz_vital_bonus=3)).vital == 8

    def test_wit_bonus_only_on_wit_lane(self, constants):
        assert value(constants, 0, CardTrainingEffect(wiz_vital_bonus=3)).vital == -21

    def test_cost_drop_leaves_gain_alone(self, constants):
        assert value(constants, 4, CardTrainingEffect(vital_cost_drop=50)).vital == 5


class TestInvalidLane:
    """Lanes outside 0-4 are rejected."""

    @pytest.mark.parametrize("train", [-1, 5, 6])
    def test_calc_rejects(self, constants, train):
        with pytest.raises(InvalidLaneError):
            value(constants, train)

    def test_check_lane_is_value_error(self):
        with pytest.raises(ValueError):
            training.check_lane(5)


class TestCardEffects:
    """Summing deck card effects in a lane."""

    def make_deck(self):
        return [
            SupportCard(card_id=1, name="a", train_type=0, effect=CardTrainingEffect(
                friendship_bonus=30, training_bonus=10, stat_bonus=[1, 0, 0, 0, 0, 0])),
            SupportCard(card_id=2, name="b", train_type=1, effect=CardTrainingEffect(
                friendship_bonus=20, motivation_bonus=40)),
        ]

    def test_effective_person_count(self):
        assert training.effective_person_count([0, 1, 6, 7]) == 2
        assert training.effective_person_count([]) == 0

    def test_friendship_only_when_shining(self):
        total = training.sum_card_effects(0, [0, 1], self.make_deck(), [True, False])
        assert total.friendship_bonus == 30
        assert total.training_bonus == 10
        assert total.motivation_bonus == 40
        assert total.stat_bonus == [1, 0, 0, 0, 0, 0]

    def test_non_deck_persons_contribute_nothing(self):
        total = training.sum_card_effects(0, [6, 7, 9], self.make_deck(), [True, True, True])
        assert total == CardTrainingEffect()
