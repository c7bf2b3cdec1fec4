# Standard library imports
from enum import Enum

# Third-party imports
from pydantic import BaseModel, ConfigDict, computed_field


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class VoteTally(BaseModel):
    model_config = ConfigDict(frozen=True)

    up: int = 0
    down: int = 0

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def net(self) -> int:
        return self.up - self.down


class VoteOutcome(BaseModel):
    """Result of a single ledger mutation."""

    model_config = ConfigDict(frozen=True)

    up_delta: int
    down_delta: int
    direction: VoteDirection | None
    tally: VoteTally


class VoteCreate(BaseModel):
    direction: VoteDirection
