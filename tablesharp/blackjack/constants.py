"""Blackjack-specific constants and value mappings."""

from tablesharp.common.card import Rank

BLACKJACK = 21
DEALER_STANDS_ON = 17
ACE_HIGH = 11
ACE_SOFT_DELTA = 10  # an Ace demoted from 11 to 1

# Array-indexed lookup (indexed by Rank.value); Aces start at 11
_BLACKJACK_VALUE_ARRAY = [
    0,   # unused
    11,  # ACE (1)
    2,   # TWO (2)
    3,   # THREE (3)
    4,   # FOUR (4)
    5,   # FIVE (5)
    6,   # SIX (6)
    7,   # SEVEN (7)
    8,   # EIGHT (8)
    9,   # NINE (9)
    10,  # TEN (10)
    10,  # JACK (11)
    10,  # QUEEN (12)
    10,  # KING (13)
]


def get_blackjack_value(rank: Rank) -> int:
    """Get the blackjack value for a given rank, counting an Ace as 11."""
    return _BLACKJACK_VALUE_ARRAY[rank.value]
