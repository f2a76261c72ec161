"""Poll service - voting orchestration.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from planner.domain import EventId, OptionId, OptionTally, Poll, PollId, PollOption, UserId
from planner.domain import votes
from planner.domain.errors import EventNotFoundError, InvalidValueError, PollNotFoundError
from planner.services.base import UNSET, Clock, LedgerService, parse_id
from planner.stores.interfaces import PollStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollResults:
    """A poll together with its vote statistics."""

    poll: Poll
    statistics: list[OptionTally]
    total_votes: int
    is_open: bool


class PollService(LedgerService):
    """Service for polls and the vote ledger."""

    def __init__(
        self, store: PollStore, clock: Clock | None = None, max_retries: int | None = None
    ) -> None:
        self._store = store
        super().__init__(clock, max_retries)

    def list_polls(self, event_id: str | None = None) -> list[Poll]:
        """Return polls, optionally only those of one event."""
        if event_id is None:
            return self._store.list_polls()
        return self._store.list_polls(parse_id(EventId, event_id, "event"))

    def get_poll(self, poll_id: str) -> Poll:
        """Return a poll by ID.

        Raises:
            InvalidIdError: If the poll_id is not a valid UUID.
            PollNotFoundError: If the poll does not exist.
        """
        parsed = parse_id(PollId, poll_id, "poll")
        poll = self._store.get_poll(parsed)
        if poll is None:
            raise PollNotFoundError(str(poll_id))
        return poll

    def get_results(self, poll_id: str) -> PollResults:
        poll = self.get_poll(poll_id)
        return PollResults(
            poll=poll,
            statistics=votes.tally(poll),
            total_votes=votes.total_votes(poll),
            is_open=votes.is_open(poll, self._now()),
        )

    def create_poll(
        self,
        event_id: str,
        question: str,
        options: Sequence[str],
        created_by: str,
        allow_multiple_choices: bool = False,
        close_date: datetime | None = None,
    ) -> Poll:
        """Create a poll for an event.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidValueError: If fewer than two options are given.
        """
        event = parse_id(EventId, event_id, "event")
        author = parse_id(UserId, created_by, "user")
        if not self._store.event_exists(event):
            raise EventNotFoundError(str(event_id))

        now = self._now()
        try:
            poll = Poll(
                id=PollId.new(),
                event_id=event,
                question=question.strip(),
                options=tuple(PollOption(id=OptionId.new(), text=text.strip()) for text in options),
                created_by=author,
                created_at=now,
                updated_at=now,
                allow_multiple_choices=allow_multiple_choices,
                close_date=close_date,
            )
        except ValueError as exc:
            raise InvalidValueError(str(exc)) from None

        created = self._store.insert_poll(poll)
        logger.info("Poll %s created for event %s", created.id, event)
        return created

    def update_poll(
        self,
        poll_id: str,
        question: str | None = None,
        close_date: datetime | None | object = UNSET,
        is_closed: bool | None = None,
    ) -> Poll:
        """Update the question, close date or closed flag of a poll.

        Pass close_date=None to remove the close date.
        """

        def apply() -> Poll:
            poll = self.get_poll(poll_id)
            changes: dict = {"updated_at": self._now()}
            if question is not None:
                changes["question"] = question.strip()
            if close_date is not UNSET:
                changes["close_date"] = close_date
            if is_closed is not None:
                changes["is_closed"] = is_closed
            return self._store.save_poll(replace(poll, **changes), poll.version)

        return self._with_retry(apply, poll_id)

    def close_poll(self, poll_id: str) -> Poll:
        return self.update_poll(poll_id, is_closed=True)

    def delete_poll(self, poll_id: str) -> None:
        """Raises PollNotFoundError if the poll does not exist."""
        parsed = parse_id(PollId, poll_id, "poll")
        if not self._store.delete_poll(parsed):
            raise PollNotFoundError(str(poll_id))
        logger.info("Poll %s deleted", parsed)

    def cast_vote(self, poll_id: str, user_id: str, option_id: str) -> Poll:
        """Add a vote; a single-choice poll rejects a second vote.

        Raises:
            PollNotFoundError, OptionNotFoundError, PollClosedError, AlreadyVotedError,
            ConcurrentModificationError
        """
        voter = parse_id(UserId, user_id, "user")
        option = parse_id(OptionId, option_id, "option")

        def apply() -> Poll:
            poll = self.get_poll(poll_id)
            updated = votes.cast_vote(poll, voter, option, self._now())
            if updated is poll:
                return poll
            return self._store.save_poll(updated, poll.version)

        saved = self._with_retry(apply, poll_id)
        logger.info("Vote recorded on poll %s option %s", poll_id, option)
        return saved

    def change_vote(self, poll_id: str, user_id: str, option_id: str) -> Poll:
        """Move the user's vote to option_id, replacing any earlier vote."""
        voter = parse_id(UserId, user_id, "user")
        option = parse_id(OptionId, option_id, "option")

        def apply() -> Poll:
            poll = self.get_poll(poll_id)
            updated = votes.change_vote(poll, voter, option, self._now())
            return self._store.save_poll(updated, poll.version)

        saved = self._with_retry(apply, poll_id)
        logger.info("Vote changed on poll %s to option %s", poll_id, option)
        return saved

    def retract_vote(self, poll_id: str, user_id: str) -> Poll:
        """Remove the user's votes; succeeds even if the user never voted."""
        voter = parse_id(UserId, user_id, "user")

        def apply() -> Poll:
            poll = self.get_poll(poll_id)
            updated = votes.retract_vote(poll, voter)
            if updated is poll:
                return poll
            return self._store.save_poll(updated, poll.version)

        return self._with_retry(apply, poll_id)
