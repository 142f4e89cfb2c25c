"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class VoteSide(str, Enum):
    OVER = "over"
    UNDER = "under"
