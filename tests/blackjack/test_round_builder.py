"""Tests for the deterministic test support helpers."""

import pytest

from tablesharp.blackjack.test_support import RoundBuilder, StackedShoe, parse_card, parse_cards
from tablesharp.common.card import Card, Rank, Suit
from tablesharp.common.errors import InvariantViolationError
from tablesharp.state import GamePhase


@pytest.mark.parametrize(
    "text, card",
    [
        ("Th", Card(Suit.HEARTS, Rank.TEN)),
        ("10h", Card(Suit.HEARTS, Rank.TEN)),
        ("as", Card(Suit.SPADES, Rank.ACE)),
        (" Qd ", Card(Suit.DIAMONDS, Rank.QUEEN)),
    ],
)
def test_parse_card(text, card):
    assert parse_card(text) == card


@pytest.mark.parametrize("text", ["", "1h", "Tx", "h"])
def test_parse_card_rejects_garbage(text):
    with pytest.raises(InvariantViolationError):
        parse_card(text)


def test_parse_cards_accepts_strings_and_cards():
    ace = Card(Suit.CLUBS, Rank.ACE)
    assert parse_cards("2h, 3d,") == [Card(Suit.HEARTS, Rank.TWO), Card(Suit.DIAMONDS, Rank.THREE)]
    assert parse_cards(["Kc", ace]) == [Card(Suit.CLUBS, Rank.KING), ace]


def test_stacked_shoe_deals_in_order_and_refills():
    shoe = StackedShoe("Ah,Kd", total_cards=10, refill="2c")
    assert shoe.total_cards == 10
    assert shoe.remaining_percentage() == pytest.approx(0.2)
    assert str(shoe.draw()) == "A of ♥"
    assert str(shoe.draw()) == "K of ♦"

    shoe.reset()
    assert shoe.reshuffle_count == 1
    assert shoe.total_cards == 1
    assert str(shoe.draw()) == "2 of ♣"


def test_stacked_shoe_total_cannot_be_smaller_than_script():
    with pytest.raises(InvariantViolationError):
        StackedShoe("Ah,Kd,Qc", total_cards=2)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "phase",
    [GamePhase.SETUP, GamePhase.BETTING, GamePhase.INITIAL_DEAL, GamePhase.PLAYER_TURNS],
)
async def test_build_stops_at_requested_phase(phase):
    engine = await (
        RoundBuilder().with_player("Alice").with_player("Bob").with_cards("Th,9h,9d,8s,7s,7c,3h").build(phase)
    )
    assert engine.phase is phase


@pytest.mark.asyncio
async def test_build_passes_phases_the_round_skips():
    engine = await (
        RoundBuilder().with_player("Alice").with_cards("Ah,9d,Kc,7c,2h").build(GamePhase.PLAYER_TURNS)
    )
    assert engine.phase is GamePhase.DEALER_TURN


@pytest.mark.asyncio
async def test_refused_builder_bet_raises():
    builder = RoundBuilder().with_player("Alice", bet="50.00", bankroll="20.00").with_cards("Th,9d,8s,7c")
    with pytest.raises(InvariantViolationError):
        await builder.build(GamePhase.INITIAL_DEAL)
