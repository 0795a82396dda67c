import uuid

import pytest

from quizhub import quizzes
from quizhub.errors import ValidationError
from quizhub.quiz_import import import_quiz, parse_quiz_document

AUTHOR = uuid.UUID("3f0d9a52-5c1b-4f3e-8a3a-2d1f9b7e6c40")

FLIP_FLOPS = """
title: Flip-Flops
description: Sequential logic basics
category: sequential-logic
difficulty: intermediate
timeLimit: 900
isPublished: true
questions:
  - questionText: Which flip-flop toggles when both inputs are high?
    questionType: multiple_choice
    options: [SR, JK, D, T]
    correctAnswer: JK
  - questionText: A D flip-flop samples its input on the clock edge.
    questionType: true_false
    options: ["true", "false"]
    correctAnswer: true
    points: 5
"""


def test_parse_quiz_document():
    quiz, questions = parse_quiz_document(FLIP_FLOPS, AUTHOR)

    assert quiz.title == "Flip-Flops"
    assert quiz.time_limit == 900
    assert quiz.is_published is True
    assert quiz.created_by == AUTHOR
    assert [q.order_number for q in questions] == [1, 2]
    assert questions[1].correct_answer == "True"
    assert questions[1].points == 5


def test_parse_reports_all_problems():
    content = """
title: Broken
difficulty: beginner
questions:
  - questionType: multiple_choice
    correctAnswer: A
  - just a string
"""
    with pytest.raises(ValidationError) as excinfo:
        parse_quiz_document(content, AUTHOR)

    message = excinfo.value.message
    assert "category" in message
    assert "Question 1: questionText" in message
    assert "Question 2 must be a mapping" in message


def test_parse_rejects_invalid_yaml():
    with pytest.raises(ValidationError, match="Invalid YAML"):
        parse_quiz_document("title: [unclosed", AUTHOR)


async def test_import_quiz_keeps_question_count(session):
    quiz = await import_quiz(session, FLIP_FLOPS, AUTHOR)

    assert quiz.total_questions == 2
    questions = await quizzes.get_questions(session, quiz.id)
    assert [q.options for q in questions] == [["SR", "JK", "D", "T"], ["true", "false"]]


async def test_import_quiz_is_all_or_nothing(session, monkeypatch):
    built = []
    build_question = quizzes.build_question

    def failing_build_question(quiz_id, data, now):
        if built:
            raise RuntimeError("question insert failed")
        built.append(data)
        return build_question(quiz_id, data, now)

    monkeypatch.setattr(quizzes, "build_question", failing_build_question)

    with pytest.raises(RuntimeError):
        await import_quiz(session, FLIP_FLOPS, AUTHOR)

    assert await quizzes.get_all_quizzes(session) == []
