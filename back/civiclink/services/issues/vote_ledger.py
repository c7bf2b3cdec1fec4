# Standard library imports
from collections.abc import Mapping

# Local application imports
from civiclink.core.exceptions import InvalidVoterError, UnknownIssueError, ValidationError
from civiclink.schemas.issues.vote_schemas import VoteDirection, VoteOutcome, VoteTally


def parse_direction(direction: VoteDirection | str) -> VoteDirection:
    if isinstance(direction, VoteDirection):
        return direction
    try:
        return VoteDirection(str(direction).lower())
    except ValueError:
        raise ValidationError({"direction": f"Unknown vote direction '{direction}'"})


class VoteLedger:
    """
    Who voted what, on which issue.

    Holds at most one active direction per (issue, voter). Tallies are always
    recounted from the active votes, never kept as running counters, so a
    replayed or repeated request cannot make them drift.
    """

    def __init__(self) -> None:
        self._votes: dict[str, dict[str, VoteDirection]] = {}

    @classmethod
    def for_issue(cls, issue_id: str, votes: Mapping[str, VoteDirection | str] | None = None) -> "VoteLedger":
        ledger = cls()
        ledger.open_issue(issue_id, votes)
        return ledger

    def open_issue(self, issue_id: str, votes: Mapping[str, VoteDirection | str] | None = None) -> None:
        """Bring an issue into this ledger's scope, optionally with its stored votes."""
        self._votes[issue_id] = {voter_id: parse_direction(d) for voter_id, d in (votes or {}).items()}

    def has_issue(self, issue_id: str) -> bool:
        return issue_id in self._votes

    def _scope(self, issue_id: str) -> dict[str, VoteDirection]:
        try:
            return self._votes[issue_id]
        except KeyError:
            raise UnknownIssueError(f"Issue {issue_id} not found")

    def cast_vote(self, issue_id: str, voter_id: str | None, direction: VoteDirection | str) -> VoteOutcome:
        """
        Record, flip or withdraw ``voter_id``'s vote on ``issue_id``.

        - no previous vote: the vote is recorded
        - same direction as the previous vote: the vote is withdrawn (toggle off)
        - opposite direction: the previous vote is replaced

        Returns:
            The count deltas, the voter's resulting direction (None after a
            toggle off) and the new tally.

        Raises:
            InvalidVoterError: voter_id is missing.
            UnknownIssueError: the issue is not in this ledger's scope.
        """
        if not voter_id:
            raise InvalidVoterError("Voting requires a signed-in user")
        wanted = parse_direction(direction)
        scope = self._scope(issue_id)

        previous = scope.get(voter_id)
        up_delta = 0
        down_delta = 0

        if previous is None:
            scope[voter_id] = wanted
            current: VoteDirection | None = wanted
        elif previous is wanted:
            del scope[voter_id]
            current = None
        else:
            scope[voter_id] = wanted
            current = wanted

        if previous is VoteDirection.UP:
            up_delta -= 1
        elif previous is VoteDirection.DOWN:
            down_delta -= 1
        if current is VoteDirection.UP:
            up_delta += 1
        elif current is VoteDirection.DOWN:
            down_delta += 1

        return VoteOutcome(
            up_delta=up_delta,
            down_delta=down_delta,
            direction=current,
            tally=self.tally_for(issue_id),
        )

    def tally_for(self, issue_id: str) -> VoteTally:
        scope = self._scope(issue_id)
        up = sum(1 for d in scope.values() if d is VoteDirection.UP)
        return VoteTally(up=up, down=len(scope) - up)

    def direction_of(self, issue_id: str, voter_id: str) -> VoteDirection | None:
        return self._scope(issue_id).get(voter_id)

    def votes_for(self, issue_id: str) -> dict[str, VoteDirection]:
        """Copy of the active votes on an issue, keyed by voter id."""
        return dict(self._scope(issue_id))
