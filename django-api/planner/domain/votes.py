"""Vote ledger: poll voting rules.

Two write paths exist for single-choice polls. cast_vote is the add-vote
path and rejects a second vote; change_vote is the explicit revote path and
moves the user's vote to the new option.
"""

from dataclasses import replace
from datetime import datetime

from planner.domain.errors import AlreadyVotedError, OptionNotFoundError, PollClosedError
from planner.domain.models import OptionTally, Poll, PollOption, Vote
from planner.domain.value_objects import OptionId, UserId


def is_open(poll: Poll, now: datetime) -> bool:
    """A poll accepts votes until it is closed or its close date has passed."""
    if poll.is_closed:
        return False
    return poll.close_date is None or now <= poll.close_date


def _require_open_option(poll: Poll, option_id: OptionId, now: datetime) -> PollOption:
    if not is_open(poll, now):
        raise PollClosedError()
    option = poll.option(option_id)
    if option is None:
        raise OptionNotFoundError(str(option_id))
    return option


def _without_user(option: PollOption, user_id: UserId) -> PollOption:
    if not option.has_vote_from(user_id):
        return option
    return replace(option, votes=tuple(v for v in option.votes if v.user_id != user_id))


def _with_vote(poll: Poll, option_id: OptionId, vote: Vote) -> tuple[PollOption, ...]:
    return tuple(
        replace(option, votes=option.votes + (vote,)) if option.id == option_id else option
        for option in poll.options
    )


def cast_vote(poll: Poll, user_id: UserId, option_id: OptionId, now: datetime) -> Poll:
    """Record a vote for option_id.

    Raises:
        PollClosedError: If the poll no longer accepts votes.
        OptionNotFoundError: If the option does not belong to the poll.
        AlreadyVotedError: If the poll is single-choice and the user already voted.
    """
    option = _require_open_option(poll, option_id, now)

    if not poll.allow_multiple_choices:
        if poll.has_user_voted(user_id):
            raise AlreadyVotedError()
    elif option.has_vote_from(user_id):
        return poll

    return replace(
        poll,
        options=_with_vote(poll, option_id, Vote(user_id=user_id, voted_at=now)),
        updated_at=now,
    )


def change_vote(poll: Poll, user_id: UserId, option_id: OptionId, now: datetime) -> Poll:
    """Replace every vote the user holds with a single vote for option_id.

    Raises:
        PollClosedError: If the poll no longer accepts votes.
        OptionNotFoundError: If the option does not belong to the poll.
    """
    _require_open_option(poll, option_id, now)

    cleared = replace(poll, options=tuple(_without_user(o, user_id) for o in poll.options))
    return replace(
        cleared,
        options=_with_vote(cleared, option_id, Vote(user_id=user_id, voted_at=now)),
        updated_at=now,
    )


def retract_vote(poll: Poll, user_id: UserId) -> Poll:
    """Remove the user's votes from every option. No-op if there are none."""
    if not poll.has_user_voted(user_id):
        return poll
    return replace(poll, options=tuple(_without_user(o, user_id) for o in poll.options))


def total_votes(poll: Poll) -> int:
    return sum(len(option.votes) for option in poll.options)


def tally(poll: Poll) -> list[OptionTally]:
    """Per-option vote counts and percentages of all votes cast."""
    total = total_votes(poll)
    return [
        OptionTally(
            option_id=option.id,
            text=option.text,
            vote_count=len(option.votes),
            percentage=round(len(option.votes) / total * 100, 2) if total else 0,
        )
        for option in poll.options
    ]
