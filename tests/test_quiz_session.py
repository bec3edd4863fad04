"""Behaviour of a single timed attempt."""

from __future__ import annotations

import pytest

from quiz_proctor.core.models import MCQ, Quiz, SessionPhase, TerminationReason
from quiz_proctor.core.services.integrity import CallbackWatcher
from quiz_proctor.core.services.quiz_session import QuizSession, start_session


@pytest.fixture
def session(sample_quiz, taker, clock, ticker):
    quiz_session = QuizSession(sample_quiz, taker, ticker=ticker, clock=clock)
    quiz_session.begin()
    return quiz_session


class TestBegin:
    def test_deadline_is_duration_after_start(self, session, clock, sample_quiz):
        assert (session.deadline - clock.now).total_seconds() == sample_quiz.duration * 60
        assert session.remaining_seconds() == 600

    def test_begin_starts_ticker_once(self, sample_quiz, taker, clock, ticker):
        quiz_session = QuizSession(sample_quiz, taker, ticker=ticker, clock=clock)
        quiz_session.begin()
        deadline = quiz_session.deadline
        clock.advance(30)
        quiz_session.begin()
        assert ticker.started
        assert ticker.interval == 1.0
        assert quiz_session.deadline == deadline

    def test_initial_snapshot(self, session):
        snapshot = session.snapshot()
        assert snapshot.position == 1
        assert snapshot.total == 2
        assert snapshot.is_first and not snapshot.is_last
        assert snapshot.selected is None
        assert snapshot.phase is SessionPhase.ACTIVE
        assert session.answers == (None, None)

    def test_quiz_without_questions_is_rejected(self, taker):
        with pytest.raises(ValueError):
            QuizSession(Quiz(id="EMPTY1", title="Empty", questions=(), duration=5), taker)


class TestAnswering:
    def test_scenario_a_partial_score(self, session):
        session.select_answer("Paris")
        session.navigate(1)
        session.select_answer("41")
        session.request_submit()
        result = session.confirm_submit()
        assert result is not None
        assert (result.score, result.total) == (1, 2)
        assert result.answers == ("Paris", "41")
        assert result.termination_reason is TerminationReason.MANUAL

    def test_reselecting_overwrites_answer(self, session):
        session.select_answer("Berlin")
        session.select_answer("Paris")
        assert session.answers[0] == "Paris"

    def test_unknown_option_is_ignored(self, session):
        session.select_answer("Lyon")
        assert session.answers[0] is None

    def test_scenario_d_navigate_before_first_question(self, session):
        before = session.snapshot()
        session.navigate(-1)
        assert session.current_index == 0
        assert session.snapshot() == before

    def test_navigate_past_last_question_is_ignored(self, session):
        session.navigate(1)
        session.navigate(1)
        assert session.current_index == 1
        assert session.snapshot().is_last

    def test_navigate_only_moves_one_step(self, session):
        session.navigate(2)
        assert session.current_index == 0

    def test_answers_survive_navigation(self, session):
        session.select_answer("Paris")
        session.navigate(1)
        session.navigate(-1)
        assert session.snapshot().selected == "Paris"

    def test_snapshot_listener_sees_changes(self, session):
        seen = []
        session.add_snapshot_listener(seen.append)
        session.select_answer("Paris")
        session.navigate(1)
        assert [snapshot.position for snapshot in seen] == [1, 2]
        assert seen[0].selected == "Paris"


class TestSubmission:
    def test_confirm_without_request_does_nothing(self, session):
        assert session.confirm_submit() is None
        assert not session.terminated

    def test_pending_confirmation_blocks_changes(self, session):
        session.request_submit()
        session.select_answer("Paris")
        session.navigate(1)
        assert session.phase is SessionPhase.PENDING_CONFIRMATION
        assert session.answers == (None, None)
        assert session.current_index == 0

    def test_cancel_returns_to_active(self, session):
        session.request_submit()
        session.cancel_submit()
        assert session.phase is SessionPhase.ACTIVE
        session.select_answer("Paris")
        assert session.answers[0] == "Paris"

    def test_finalization_is_idempotent(self, session):
        session.select_answer("Paris")
        finished = []
        session.add_finish_listener(finished.append)
        first = session.force_submit(TerminationReason.MANUAL)
        second = session.force_submit(TerminationReason.TIMEOUT)
        session.on_integrity_violation()
        assert first is second
        assert session.confirm_submit() is first
        assert session.termination_reason is TerminationReason.MANUAL
        assert finished == [first]

    def test_input_after_termination_is_ignored(self, session):
        session.force_submit(TerminationReason.MANUAL)
        session.select_answer("Paris")
        session.navigate(1)
        session.request_submit()
        assert session.answers == (None, None)
        assert session.phase is SessionPhase.TERMINATED
        assert session.remaining_seconds() == 0

    def test_score_never_exceeds_total(self, session):
        session.select_answer("Paris")
        session.navigate(1)
        session.select_answer("42")
        result = session.force_submit(TerminationReason.MANUAL)
        assert 0 <= result.score <= result.total
        assert result.score == 2


class TestTimeout:
    def test_scenario_b_tick_after_deadline_times_out(self, sample_questions, taker, clock, ticker):
        quiz = Quiz(id="ONEMIN", title="Quick", questions=tuple(sample_questions), duration=1)
        quiz_session = QuizSession(quiz, taker, ticker=ticker, clock=clock)
        quiz_session.begin()
        quiz_session.select_answer("Paris")
        clock.advance(61)
        quiz_session.tick()
        result = quiz_session.result
        assert result is not None
        assert result.termination_reason is TerminationReason.TIMEOUT
        assert result.score == 1
        assert ticker.stopped

    def test_tick_before_deadline_only_refreshes(self, session, clock):
        seen = []
        session.add_snapshot_listener(seen.append)
        clock.advance(90.5)
        session.tick()
        assert not session.terminated
        assert seen[-1].remaining_seconds == 509

    def test_tick_exactly_at_deadline_times_out(self, session, clock):
        clock.advance(600)
        session.tick()
        assert session.termination_reason is TerminationReason.TIMEOUT

    def test_ticker_callback_drives_timeout(self, session, clock, ticker):
        clock.advance(601)
        ticker.callback()
        assert session.terminated


class TestIntegrity:
    def test_scenario_c_violation_zeroes_score_but_keeps_answers(
        self, sample_quiz, taker, clock, ticker
    ):
        watcher = CallbackWatcher()
        quiz_session = start_session(sample_quiz, taker, ticker=ticker, watcher=watcher, clock=clock)
        quiz_session.select_answer("Paris")
        assert watcher.signal_violation()
        result = quiz_session.result
        assert result.termination_reason is TerminationReason.INTEGRITY_VIOLATION
        assert result.score == 0
        assert result.answers == ("Paris", None)

    def test_watcher_uninstalled_on_every_exit(self, sample_quiz, taker, clock, ticker):
        for reason in TerminationReason:
            watcher = CallbackWatcher()
            quiz_session = start_session(
                sample_quiz, taker, ticker=ticker, watcher=watcher, clock=clock
            )
            assert watcher.installed
            quiz_session.force_submit(reason)
            assert not watcher.installed
            assert not watcher.signal_violation()


class TestDuplicateOptions:
    def test_duplicate_correct_text_scores_by_equality(self, taker, clock):
        quiz = Quiz(
            id="DUP001",
            title="Duplicates",
            questions=(MCQ(question="Pick yes", options=("yes", "no", "yes"), correct_answer="yes"),),
            duration=5,
        )
        quiz_session = start_session(quiz, taker, clock=clock)
        quiz_session.select_answer("yes")
        result = quiz_session.force_submit(TerminationReason.MANUAL)
        assert result.score == 1


def test_finish_listeners_receive_result(sample_quiz, taker, clock):
    recorded = []
    quiz_session = start_session(sample_quiz, taker, clock=clock, finish_listeners=[recorded.append])
    result = quiz_session.force_submit(TerminationReason.MANUAL)
    assert recorded == [result]
    assert result.submitted_at == clock.now
