"""Pydantic request/response schemas for pm_vote.

VoteRequest is the structural pre-check: a body that fails here never
reaches the ledger. Field names follow the public JSON contract (camelCase
aliases are accepted alongside snake_case).
"""

from pydantic import BaseModel, ConfigDict, Field

from src.pm_common.enums import VoteSide


class VoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # markets.id is VARCHAR(64): a longer id is malformed, not merely unknown
    market_id: str = Field(..., min_length=1, max_length=64, alias="marketId")
    side: VoteSide


class VoteResponse(BaseModel):
    market_id: str
    side: VoteSide
    line_at_vote: float
    new_line: float
    over_votes: int
    under_votes: int
