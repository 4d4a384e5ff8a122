"""Tests for the Gradio client helpers (backend calls are stubbed)."""

from __future__ import annotations

import gradio_app

from conftest import make_result


class TestFormatResultMarkdown:
    def test_cards_recommendations_and_scores(self):
        md = gradio_app.format_result_markdown(make_result())
        assert "### Emotional Tone: Tense but caring" in md
        assert "Alex is pressing; Sam is deflecting." in md
        assert "1. Name the need" in md
        assert "4. Schedule a talk" in md
        assert "Resolution potential: 7.5/10" in md
        assert "### Full Analysis" in md

    def test_tolerates_missing_fields(self):
        md = gradio_app.format_result_markdown({"emotionalIntensity": 3})
        assert "### Power Dynamics: n/a" in md
        assert "Emotional intensity: 3/10" in md
        assert "Power balance: 0/10" in md
        assert "Recommendations" not in md


def test_plot_scores_image_is_png():
    png = gradio_app.plot_scores_image(make_result())
    assert png[:8] == b"\x89PNG\r\n\x1a\n"


def test_build_recent_rows():
    items = [
        {
            "createdAt": "2024-01-01T12:00:02",
            "emotionalTone": "Warm",
            "emotionalIntensity": "3",
            "resolutionPotential": "8",
            "conversation": {"title": "Dinner", "content": "A: hi", "analysisType": "Relationship Dynamics"},
        },
        {"createdAt": "2024-01-01T12:00:01", "emotionalTone": None, "conversationId": "gone"},
    ]
    rows = gradio_app.build_recent_rows(items)
    assert rows[0] == ["2024-01-01T12:00:02", "Dinner", "Relationship Dynamics", "Warm", "3", "8"]
    assert rows[1][1] == "(conversation missing)"


class TestRunAnalysis:
    ARGS = ("http://backend", " Title ", "A: hi\nB: hey", "Conflict Resolution", "gemini-2.5-flash", 0.3, "1000")

    def test_empty_content(self):
        md, img, status = gradio_app.run_analysis("http://backend", "", "  ", "x", "m", 0.7, "500")
        assert (md, img) == ("", None)
        assert "Paste a conversation" in status

    def test_creates_then_analyzes(self, monkeypatch):
        sent = {}

        def fake_create(url, payload):
            sent["payload"] = payload
            return {"id": "conv-1"}

        def fake_analyze(url, conversation_id):
            sent["analyzed"] = conversation_id
            return {"analysis": {"id": "an-1"}, "result": make_result()}

        monkeypatch.setattr(gradio_app, "create_conversation", fake_create)
        monkeypatch.setattr(gradio_app, "analyze_conversation", fake_analyze)

        md, img, status = gradio_app.run_analysis(*self.ARGS)

        assert sent["payload"] == {
            "title": "Title",
            "content": "A: hi\nB: hey",
            "analysisType": "Conflict Resolution",
            "model": "gemini-2.5-flash",
            "temperature": "0.3",
            "maxTokens": 1000,
        }
        assert sent["analyzed"] == "conv-1"
        assert "Tense but caring" in md
        assert img is not None
        assert "an-1" in status

    def test_analysis_failure_reports_saved_conversation(self, monkeypatch):
        def failing_analyze(url, conversation_id):
            raise RuntimeError("500: Failed to analyze conversation: boom")

        monkeypatch.setattr(gradio_app, "create_conversation", lambda url, payload: {"id": "conv-9"})
        monkeypatch.setattr(gradio_app, "analyze_conversation", failing_analyze)

        md, img, status = gradio_app.run_analysis(*self.ARGS)
        assert md == "" and img is None
        assert "conv-9" in status
        assert "boom" in status

    def test_load_recent_error(self, monkeypatch):
        def boom(url):
            raise RuntimeError("connection refused")

        monkeypatch.setattr(gradio_app, "fetch_analyses", boom)
        rows, status = gradio_app.load_recent("http://backend")
        assert rows == []
        assert "connection refused" in status
