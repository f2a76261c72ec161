"""Unit tests for the vote ledger.

Run with: pytest tests/test_vote_ledger.py -v
"""

import random
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from planner.domain import OptionId, UserId
from planner.domain import votes
from planner.domain.errors import AlreadyVotedError, OptionNotFoundError, PollClosedError

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _counts(poll) -> list[int]:
    return [tally.vote_count for tally in votes.tally(poll)]


class TestIsOpen:
    """Tests for the derived open predicate."""

    def test_open_without_close_date(self, make_poll):
        """A poll with no close date and no closed flag is open."""
        assert votes.is_open(make_poll(), NOW)

    def test_closed_flag_wins(self, make_poll):
        """The closed flag closes the poll regardless of the date."""
        poll = make_poll(is_closed=True, close_date=NOW + timedelta(days=1))
        assert not votes.is_open(poll, NOW)

    def test_open_on_the_close_date(self, make_poll):
        """The close date itself is still inside the voting window."""
        assert votes.is_open(make_poll(close_date=NOW), NOW)

    def test_closed_after_the_close_date(self, make_poll):
        """A past close date closes the poll."""
        poll = make_poll(close_date=NOW - timedelta(seconds=1))
        assert not votes.is_open(poll, NOW)


class TestCastVote:
    """Tests for cast_vote."""

    def test_vote_is_recorded(self, make_poll):
        """A vote is appended to the chosen option with the current time."""
        poll = make_poll()
        user = UserId.new()

        updated = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        assert updated.options[0].votes[0].user_id == user
        assert updated.options[0].votes[0].voted_at == NOW
        assert _counts(updated) == [1, 0]

    def test_input_poll_is_untouched(self, make_poll):
        """The ledger returns a new poll and leaves its input unchanged."""
        poll = make_poll()
        votes.cast_vote(poll, UserId.new(), poll.options[0].id, NOW)
        assert votes.total_votes(poll) == 0

    def test_closed_poll_rejects_vote(self, make_poll):
        """Voting on a closed poll raises PollClosedError."""
        poll = make_poll(is_closed=True)
        with pytest.raises(PollClosedError):
            votes.cast_vote(poll, UserId.new(), poll.options[0].id, NOW)

    def test_expired_poll_rejects_vote(self, make_poll):
        """Voting after the close date raises PollClosedError."""
        poll = make_poll(close_date=NOW - timedelta(hours=1))
        with pytest.raises(PollClosedError):
            votes.cast_vote(poll, UserId.new(), poll.options[0].id, NOW)

    def test_unknown_option_rejected(self, make_poll):
        """An option from outside the poll raises OptionNotFoundError."""
        with pytest.raises(OptionNotFoundError):
            votes.cast_vote(make_poll(), UserId.new(), OptionId.new(), NOW)

    def test_closed_is_checked_before_option(self, make_poll):
        """A closed poll reports PollClosedError even for an unknown option."""
        with pytest.raises(PollClosedError):
            votes.cast_vote(make_poll(is_closed=True), UserId.new(), OptionId.new(), NOW)

    def test_single_choice_rejects_second_vote(self, make_poll):
        """In single-choice mode a second vote on any option raises AlreadyVotedError."""
        poll = make_poll()
        user = UserId.new()
        voted = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        with pytest.raises(AlreadyVotedError):
            votes.cast_vote(voted, user, poll.options[1].id, NOW)
        with pytest.raises(AlreadyVotedError):
            votes.cast_vote(voted, user, poll.options[0].id, NOW)

    def test_multiple_choice_allows_several_options(self, make_poll):
        """In multi-choice mode a user may vote for several options."""
        poll = make_poll(options=("A", "B", "C"), allow_multiple_choices=True)
        user = UserId.new()

        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)
        poll = votes.cast_vote(poll, user, poll.options[2].id, NOW)

        assert _counts(poll) == [1, 0, 1]

    def test_multiple_choice_repeat_is_idempotent(self, make_poll):
        """Voting twice for the same option in multi-choice mode keeps a single vote."""
        poll = make_poll(allow_multiple_choices=True)
        user = UserId.new()
        once = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        twice = votes.cast_vote(once, user, poll.options[0].id, NOW)

        assert twice is once
        assert _counts(twice) == [1, 0]

    def test_single_choice_holds_at_most_one_vote_per_user(self, make_poll):
        """After any sequence of cast_vote calls, a user's vote sits in at most one option."""
        rng = random.Random(7)
        poll = make_poll(options=("A", "B", "C", "D"))
        user = UserId.new()

        for _ in range(25):
            option = rng.choice(poll.options)
            try:
                poll = votes.cast_vote(poll, user, option.id, NOW)
            except AlreadyVotedError:
                pass
            assert sum(option.has_vote_from(user) for option in poll.options) <= 1


class TestChangeVote:
    """Tests for the explicit revote path."""

    def test_revote_moves_the_vote(self, make_poll):
        """Options A, B: vote A then revote B gives tally A:0, B:1."""
        poll = make_poll(options=("A", "B"))
        user = UserId.new()
        option_a, option_b = poll.options[0].id, poll.options[1].id

        poll = votes.cast_vote(poll, user, option_a, NOW)
        assert _counts(poll) == [1, 0]

        poll = votes.change_vote(poll, user, option_b, NOW)
        assert _counts(poll) == [0, 1]

    def test_change_without_prior_vote_adds_one(self, make_poll):
        """change_vote works as a plain vote when the user had none."""
        poll = make_poll()
        updated = votes.change_vote(poll, UserId.new(), poll.options[1].id, NOW)
        assert _counts(updated) == [0, 1]

    def test_change_collapses_multiple_votes(self, make_poll):
        """In multi-choice mode change_vote replaces all of the user's votes with one."""
        poll = make_poll(options=("A", "B", "C"), allow_multiple_choices=True)
        user = UserId.new()
        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)
        poll = votes.cast_vote(poll, user, poll.options[1].id, NOW)

        poll = votes.change_vote(poll, user, poll.options[2].id, NOW)

        assert _counts(poll) == [0, 0, 1]

    def test_change_keeps_other_users_votes(self, make_poll):
        """Only the voting user's votes move."""
        poll = make_poll()
        other = UserId.new()
        user = UserId.new()
        poll = votes.cast_vote(poll, other, poll.options[0].id, NOW)
        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        poll = votes.change_vote(poll, user, poll.options[1].id, NOW)

        assert _counts(poll) == [1, 1]
        assert poll.options[0].has_vote_from(other)

    def test_change_on_closed_poll_rejected(self, make_poll):
        """The revote path also refuses closed polls."""
        poll = make_poll(is_closed=True)
        with pytest.raises(PollClosedError):
            votes.change_vote(poll, UserId.new(), poll.options[0].id, NOW)


class TestRetractVote:
    """Tests for retract_vote."""

    def test_retract_removes_vote(self, make_poll):
        """Retracting removes the user's vote."""
        poll = make_poll()
        user = UserId.new()
        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        assert _counts(votes.retract_vote(poll, user)) == [0, 0]

    def test_retract_twice_is_noop(self, make_poll):
        """A second retract neither raises nor changes the poll."""
        poll = make_poll()
        user = UserId.new()
        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        once = votes.retract_vote(poll, user)
        twice = votes.retract_vote(once, user)

        assert twice is once

    def test_retract_allowed_on_closed_poll(self, make_poll):
        """Retracting does not depend on the poll being open."""
        poll = make_poll()
        user = UserId.new()
        poll = votes.cast_vote(poll, user, poll.options[0].id, NOW)

        closed = votes.retract_vote(replace(poll, is_closed=True), user)

        assert votes.total_votes(closed) == 0


class TestTally:
    """Tests for tally."""

    def test_empty_poll_has_zero_percentages(self, make_poll):
        """With no votes every percentage is 0."""
        tallies = votes.tally(make_poll())
        assert [t.percentage for t in tallies] == [0, 0]
        assert [t.text for t in tallies] == ["Friday", "Saturday"]

    def test_percentages_rounded_to_two_decimals(self, make_poll):
        """Percentages are rounded to 2 decimals."""
        poll = make_poll(options=("A", "B"))
        for option in (0, 0, 1):
            poll = votes.cast_vote(poll, UserId.new(), poll.options[option].id, NOW)

        assert [t.percentage for t in votes.tally(poll)] == [66.67, 33.33]

    def test_tally_follows_option_order(self, make_poll):
        """One entry per option, in the poll's option order."""
        poll = make_poll(options=("A", "B", "C"))
        assert [t.option_id for t in votes.tally(poll)] == [o.id for o in poll.options]
