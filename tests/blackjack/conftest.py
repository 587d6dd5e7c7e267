"""
Pytest configuration and fixtures for blackjack tests.
"""

import pytest

from tablesharp.blackjack.hand import BlackjackHand
from tablesharp.blackjack.test_support import parse_cards
from tablesharp.common.money import Money


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "split: mark test as testing split scenarios")


@pytest.fixture
def hand_of():
    """Build a BlackjackHand from short card notation, e.g. hand_of('Ah,Kd')."""

    def _build(cards, is_split=False):
        return BlackjackHand(parse_cards(cards), is_split=is_split)

    return _build


@pytest.fixture
def usd():
    return lambda amount: Money(amount, "USD")
