"""Line adjustment — pure arithmetic, no I/O.

Given a market's tallies *before* a vote, the side of the new vote and the
current line, produce the new tallies and the new line:

    total      = new_over + new_under          (>= 1)
    imbalance  = new_over / total - 0.5        (in [-0.5, 0.5], > 0 = over-heavy)
    adjustment = imbalance * BASE_ADJUSTMENT * (total / sqrt(total))
    new_line   = clamp(current_line + adjustment, MIN_LINE, MAX_LINE)

Note total / sqrt(total) == sqrt(total): per-vote movement grows with the
number of votes cast while the imbalance term shrinks as votes balance out.
The formula is kept exactly as the product has always computed it.
"""

import math
from dataclasses import dataclass

from src.pm_common.enums import VoteSide

BASE_ADJUSTMENT: float = 2.0  # dollars
MIN_LINE: float = 10.0
MAX_LINE: float = 100.0


@dataclass(frozen=True)
class LineAdjustment:
    over_votes: int
    under_votes: int
    new_line: float
    adjustment: float


def clamp_line(line: float) -> float:
    return max(MIN_LINE, min(MAX_LINE, line))


def adjust_line(
    over_votes: int,
    under_votes: int,
    side: VoteSide | str,
    current_line: float,
) -> LineAdjustment:
    side = VoteSide(side)
    new_over = over_votes + 1 if side is VoteSide.OVER else over_votes
    new_under = under_votes + 1 if side is VoteSide.UNDER else under_votes

    total = new_over + new_under
    imbalance = new_over / total - 0.5
    adjustment = imbalance * BASE_ADJUSTMENT * (total / math.sqrt(total))

    return LineAdjustment(
        over_votes=new_over,
        under_votes=new_under,
        new_line=clamp_line(current_line + adjustment),
        adjustment=adjustment,
    )
