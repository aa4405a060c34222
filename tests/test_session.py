"""Tests for quiz session state and submission validation."""

from __future__ import annotations

import pytest

from quiz_gate.config.schema import SubmissionConfig
from quiz_gate.data_models import LeaderboardEntry, Question
from quiz_gate.session import QuizSession, SessionFlags, validate_submission


def make_questions(count: int):
    return [Question(id=i, question=f"Q{i}?", choices=["a", "b"]) for i in range(1, count + 1)]


@pytest.fixture
def session():
    return QuizSession(questions=make_questions(3))


def test_select_answer_is_idempotent_and_overwrites(session):
    session.select_answer(1, "a")
    snapshot = dict(session.answers)
    session.select_answer(1, "a")
    assert session.answers == snapshot
    session.select_answer(1, "b")
    assert session.answers == {1: "b"}


def test_select_answer_rejects_unknown_question(session):
    with pytest.raises(KeyError):
        session.select_answer(99, "a")


def test_progress_counts_answered(session):
    session.select_answer(1, "a")
    session.select_answer(3, "b")
    progress = session.progress
    assert (progress.answered, progress.total) == (2, 3)
    assert not progress.complete
    session.select_answer(2, "a")
    assert session.progress.complete
    assert session.progress.fraction == 1.0


def test_reset_keeps_questions_and_leaderboard(session):
    session.leaderboard = [LeaderboardEntry(name="A", score=1)]
    session.select_answer(1, "a")
    session.name = "Zoe"
    session.score = 2
    session.message = "Good"
    session.reset()
    assert session.answers == {}
    assert session.name == ""
    assert session.score is None
    assert session.message == ""
    assert len(session.questions) == 3
    assert session.leaderboard


def test_replace_questions_drops_stale_answers(session):
    session.select_answer(1, "a")
    session.select_answer(3, "b")
    session.replace_questions(make_questions(2))
    assert session.answers == {1: "a"}


def test_flags_are_replaced_not_mutated():
    flags = SessionFlags()
    loading = flags.with_changes(loading=True)
    assert not flags.loading
    assert loading.loading
    with pytest.raises(AttributeError):
        flags.loading = True


def test_incomplete_submission_cites_both_counts():
    questions = make_questions(12)
    answers = {i: "a" for i in range(1, 8)}
    message = validate_submission("Player", questions, answers, SubmissionConfig())
    assert "7" in message and "12" in message


def test_complete_submission_passes():
    questions = make_questions(12)
    answers = {i: "a" for i in range(1, 13)}
    assert validate_submission("Player", questions, answers, SubmissionConfig()) is None


@pytest.mark.parametrize("name", ["", "   ", "A", " B ", "x" * 51])
def test_name_length_is_checked_after_trimming(name):
    questions = make_questions(1)
    message = validate_submission(name, questions, {1: "a"}, SubmissionConfig())
    assert message is not None
    assert "name" in message.lower()


def test_name_checked_before_completeness():
    message = validate_submission("A", make_questions(2), {}, SubmissionConfig())
    assert "name" in message.lower()


def test_blank_answer_value_rejected():
    message = validate_submission("Player", make_questions(2), {1: "a", 2: "  "}, SubmissionConfig())
    assert message == "Every question needs a selected answer."


def test_empty_question_set_is_never_complete():
    message = validate_submission("Player", [], {}, SubmissionConfig())
    assert message is not None
    assert "not loaded" in message
