import pytest

from tablesharp.blackjack.action import Action
from tablesharp.blackjack.results import GameResult
from tablesharp.blackjack.rules import Rules
from tablesharp.common.errors import InvariantViolationError


@pytest.fixture
def rules():
    return Rules()


def test_defaults_round_trip_through_dict(rules):
    assert rules.to_dict() == {
        "blackjack_payout": 1.5,
        "dealer_hit_soft_17": False,
        "allow_split": True,
        "allow_double_down": True,
        "num_decks": 6,
        "min_bet": 1.0,
        "max_bet": 1000.0,
    }
    assert Rules(**rules.to_dict()).to_dict() == rules.to_dict()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"blackjack_payout": 0},
        {"num_decks": 0},
        {"min_bet": 10.0, "max_bet": 10.0},
    ],
)
def test_invalid_rules_rejected(kwargs):
    with pytest.raises(InvariantViolationError):
        Rules(**kwargs)


@pytest.mark.parametrize(
    "value, is_soft, hits",
    [(12, False, True), (16, False, True), (17, False, False), (17, True, False), (18, True, False)],
)
def test_dealer_stands_on_all_17s(rules, value, is_soft, hits):
    assert rules.should_dealer_hit(value, is_soft) is hits


def test_dealer_hits_soft_17_when_configured():
    rules = Rules(dealer_hit_soft_17=True)
    assert rules.should_dealer_hit(17, True)
    assert not rules.should_dealer_hit(17, False)
    assert not rules.should_dealer_hit(18, True)


@pytest.mark.parametrize(
    "player, dealer, expected",
    [
        ("Th,8s", "9d,7c,3h", GameResult.LOSE),
        ("Th,9s", "9d,7c,Kh", GameResult.WIN),
        ("Th,6s,9c", "9d,7c,Kh", GameResult.LOSE),
        ("Ah,Ks", "Td,7c,5h", GameResult.BLACKJACK),
        ("Ah,Ks", "Ad,Qc", GameResult.PUSH),
        ("Th,Js", "Ad,Qc", GameResult.LOSE),
        ("7h,4s,Td", "Ad,Qc", GameResult.LOSE),
        ("Ah,Ks", "9d,Qc", GameResult.BLACKJACK),
        ("Th,8s", "9d,9c", GameResult.PUSH),
        ("Th,Qs", "9d,Jc", GameResult.WIN),
    ],
)
def test_determine_result(rules, hand_of, player, dealer, expected):
    assert rules.determine_result(hand_of(player), hand_of(dealer)) is expected


def test_split_twenty_one_is_not_a_natural(rules, hand_of):
    result = rules.determine_result(hand_of("Ah,Ks", is_split=True), hand_of("9d,Qc"))
    assert result is GameResult.WIN


def test_valid_actions_for_opening_pair(rules, hand_of):
    assert rules.valid_actions(hand_of("8h,8d")) == [
        Action.HIT,
        Action.STAND,
        Action.DOUBLE,
        Action.SPLIT,
    ]


def test_valid_actions_after_a_hit(rules, hand_of):
    assert rules.valid_actions(hand_of("5h,3d,2c")) == [Action.HIT, Action.STAND]


def test_valid_actions_on_twenty_one_is_stand_only(rules, hand_of):
    assert rules.valid_actions(hand_of("7h,4d,Tc")) == [Action.STAND]


@pytest.mark.parametrize("cards", ["Ah,Kd", "Th,Td,5c"])
def test_no_actions_on_resolved_hands(rules, hand_of, cards):
    assert rules.valid_actions(hand_of(cards)) == []


def test_completed_hand_has_no_actions(rules, hand_of):
    hand = hand_of("Th,7d")
    hand.mark_complete()
    assert rules.valid_actions(hand) == []


def test_split_hands_cannot_be_resplit_or_doubled(rules, hand_of):
    hand = hand_of("8h,8d", is_split=True)
    assert not rules.can_split(hand)
    assert not rules.can_double_down(hand)
    assert not rules.is_valid_action(Action.SPLIT, hand)


def test_table_switches_disable_actions(hand_of):
    rules = Rules(allow_split=False, allow_double_down=False)
    assert rules.valid_actions(hand_of("8h,8d")) == [Action.HIT, Action.STAND]


def test_split_needs_equal_rank(rules, hand_of):
    assert not rules.can_split(hand_of("Kh,Qd"))
    assert rules.can_split(hand_of("Kh,Kd"))
