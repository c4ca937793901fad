"""Tests for view.py: screens, option marks, knowledge tiers and completion stats."""

from __future__ import annotations

import asyncio

from adaptive_quiz.view import build_view, knowledge_tier, knowledge_view


def _run(coro):
    return asyncio.run(coro)


class TestKnowledgeTier:
    def test_thresholds(self):
        assert knowledge_tier(0) == "low"
        assert knowledge_tier(29) == "low"
        assert knowledge_tier(30) == "medium"
        assert knowledge_tier(69) == "medium"
        assert knowledge_tier(70) == "high"

    def test_knowledge_view_label(self):
        view = knowledge_view(0.456)
        assert view is not None
        assert view.label == "46%"
        assert view.tier == "medium"
        assert knowledge_view(None) is None


class TestBuildView:
    def test_idle_is_start_screen(self, controller):
        view = build_view(controller)
        assert view.screen == "start"
        assert view.options == ()

    def test_notice_is_carried(self, controller):
        assert build_view(controller, notice="Error starting session: boom").notice == "Error starting session: boom"

    def test_active_question(self, controller):
        _run(controller.start_session("bkt"))
        view = build_view(controller)
        assert view.screen == "question"
        assert view.question_number == 1
        assert view.progress_pct == 0
        assert view.question_text == "Question 1?"
        assert [option.text for option in view.options] == ["A", "B"]
        assert all(option.enabled and option.mark == "" for option in view.options)
        assert view.feedback is None
        assert view.advance_label is None
        assert view.knowledge is not None and view.knowledge.label == "1%"
        assert view.show_loading is False

    def test_wrong_answer_marks_options(self, controller):
        _run(controller.start_session("bkt"))
        _run(controller.select_answer("B"))
        view = build_view(controller)
        marks = {option.text: option.mark for option in view.options}
        assert marks == {"A": "correct-answer", "B": "incorrect-answer"}
        assert not any(option.enabled for option in view.options)
        assert view.feedback is not None
        assert view.feedback.headline == "✗ Incorrect"
        assert view.feedback.correct_answer_line == "The correct answer is: A"
        assert view.advance_label == "Next Question"
        assert view.question_number == 1

    def test_correct_answer_feedback(self, controller):
        _run(controller.start_session("bkt"))
        _run(controller.select_answer("A"))
        view = build_view(controller)
        assert view.feedback.headline == "✓ Correct!"
        assert view.feedback.correct_answer_line == ""
        assert {option.text: option.mark for option in view.options} == {"A": "correct-answer", "B": ""}

    def test_llm_mode_panels(self, controller):
        _run(controller.start_session("llm"))
        _run(controller.select_answer("A"))
        view = build_view(controller)
        assert view.knowledge is None
        assert view.show_loading is True
        assert view.selection_reasoning == "Picked an easy one to start."
        assert view.llm_feedback == "Nice work."

    def test_last_answer_offers_results(self, controller, service):
        service.session_length = 1
        _run(controller.start_session("bkt"))
        _run(controller.select_answer("A"))
        assert build_view(controller).advance_label == "View Results"

    def test_completion_screen(self, controller, service):
        service.session_length = 4
        _run(controller.start_session("bkt"))
        for answer in ("A", "B", "A"):
            _run(controller.select_answer(answer))
            _run(controller.advance())
        _run(controller.select_answer("B"))
        _run(controller.advance())

        view = build_view(controller)
        assert view.screen == "complete"
        assert view.completion is not None
        assert view.completion.correct_count == 2
        assert view.completion.accuracy.percent == 50
        assert view.completion.final_knowledge is not None
        assert view.completion.final_knowledge.label == "40%"

    def test_llm_completion_hides_final_knowledge(self, controller, service):
        service.session_length = 1
        _run(controller.start_session("llm"))
        _run(controller.select_answer("A"))
        _run(controller.advance())
        view = build_view(controller)
        assert view.screen == "complete"
        assert view.completion.final_knowledge is None
