"""Tests for the travel-rep assignment window."""

import itertools
from datetime import datetime, timedelta

import pytest

from travel_status.engine.travel_rep import (
    ASK_TR_TO_CALL,
    NEEDS_TR_ASSIGNMENT,
    evaluate_travel_rep,
)
from travel_status.schemas.status_schema import TravelRepState

from tests.conftest import TODAY, days_out

FOLLOW_UP_STATES = {TravelRepState.NEEDS_URGENT, TravelRepState.ASSIGNED_NO_DOCS}


def _evaluate(travel_date, confirm="confirm", rep="", docs="", **kwargs):
    return evaluate_travel_rep(travel_date, confirm, rep, docs, TODAY, **kwargs)


class TestDecisionChain:
    def test_no_date(self):
        assert _evaluate("").state == TravelRepState.NO_DATE

    def test_past_date(self):
        result = _evaluate(days_out(-1))
        assert result.state == TravelRepState.PAST_DATE
        assert result.days_remaining == -1

    def test_today_is_not_past(self):
        assert _evaluate(days_out(0)).state == TravelRepState.NEEDS_URGENT

    def test_not_confirmed(self):
        assert _evaluate(days_out(30), confirm="pending").state == TravelRepState.NOT_CONFIRMED

    def test_confirm_is_exact_match(self):
        assert _evaluate(days_out(30), confirm="Confirmed").state == TravelRepState.NOT_CONFIRMED

    def test_needs_urgent_raises_follow_up(self):
        result = _evaluate(days_out(40))
        assert result.state == TravelRepState.NEEDS_URGENT
        assert result.days_remaining == 40
        assert result.follow_up.memo_type == NEEDS_TR_ASSIGNMENT
        assert days_out(40) in result.follow_up.details
        assert "Days remaining: 40" in result.follow_up.details

    def test_assigned_without_documents(self):
        result = _evaluate(days_out(20), rep="John Smith")
        assert result.state == TravelRepState.ASSIGNED_NO_DOCS
        assert result.rep_name == "John Smith"
        assert result.follow_up.memo_type == ASK_TR_TO_CALL
        assert "John Smith" in result.follow_up.details

    def test_complete(self):
        result = _evaluate(days_out(20), rep="John Smith", docs=days_out(-3))
        assert result.state == TravelRepState.COMPLETE
        assert result.docs_sent_date == TODAY - timedelta(days=3)
        assert result.follow_up is None

    def test_datetime_today_accepted(self):
        now = datetime(TODAY.year, TODAY.month, TODAY.day, 23, 59)
        result = evaluate_travel_rep(days_out(10), "confirm", "", "", now)
        assert result.days_remaining == 10


class TestWindowBoundaries:
    @pytest.mark.parametrize(
        "days, expected",
        [
            (44, TravelRepState.NEEDS_URGENT),
            (45, TravelRepState.NORMAL_WINDOW),
            (75, TravelRepState.NORMAL_WINDOW),
            (76, TravelRepState.TOO_EARLY),
        ],
    )
    def test_thresholds(self, days, expected):
        assert _evaluate(days_out(days)).state == expected

    def test_configurable_thresholds(self):
        assert _evaluate(days_out(50), urgent_days=60, window_end_days=90).state == TravelRepState.NEEDS_URGENT
        assert _evaluate(days_out(95), urgent_days=60, window_end_days=90).state == TravelRepState.TOO_EARLY


class TestBlankEquivalence:
    @pytest.mark.parametrize("trip", [days_out(30), days_out(60)])
    def test_blank_rep_and_docs(self, trip):
        results = [
            _evaluate(trip, rep=blank, docs=blank).model_dump()
            for blank in (None, "", "0000-00-00")
        ]
        assert results[0] == results[1] == results[2]

    def test_blank_travel_date(self):
        results = {_evaluate(blank).state for blank in (None, "", "0000-00-00")}
        assert results == {TravelRepState.NO_DATE}

    def test_blank_docs_with_rep(self):
        results = [_evaluate(days_out(30), rep="Ann", docs=blank).model_dump() for blank in (None, "", "0000-00-00")]
        assert results[0] == results[1] == results[2]
        assert results[0]["state"] == TravelRepState.ASSIGNED_NO_DOCS

    def test_unparseable_date_counts_as_blank(self):
        assert _evaluate("someday").state == TravelRepState.NO_DATE


class TestTotality:
    def test_every_combination_yields_one_state(self):
        travel_dates = [None, "", "0000-00-00", "garbage", days_out(-5), days_out(0),
                        days_out(44), days_out(45), days_out(75), days_out(76)]
        confirms = ["confirm", "pending", "", None]
        reps = [None, "", "Ann Lee"]
        docs = [None, "0000-00-00", days_out(-2)]

        for trip, confirm, rep, sent in itertools.product(travel_dates, confirms, reps, docs):
            result = evaluate_travel_rep(trip, confirm, rep, sent, TODAY)
            assert isinstance(result.state, TravelRepState)
            assert result.state != TravelRepState.NOT_NEEDED
            assert (result.follow_up is not None) == (result.state in FOLLOW_UP_STATES)

    def test_summary_state_hides_inactive_states(self):
        assert _evaluate("").summary_state == TravelRepState.NOT_NEEDED
        assert _evaluate(days_out(-1)).summary_state == TravelRepState.NOT_NEEDED
        assert _evaluate(days_out(30), confirm="").summary_state == TravelRepState.NOT_NEEDED
        assert _evaluate(days_out(30)).summary_state == TravelRepState.NEEDS_URGENT
