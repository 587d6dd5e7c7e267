"""Defines the Action enum for the decisions a player can make on their turn."""
from enum import Enum


class Action(Enum):
    """Enum for the possible actions a player can take in a game of blackjack."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"
