"""
Tests for the terminal client rendering and argument handling.
"""

import json

from client.cli import (
    ERROR_GUIDANCE,
    RESULT_TITLE,
    main,
    progress_bar,
    render_state,
)
from client.scheduler import Phase, RetryState


class TestRenderState:
    """Each phase renders like the catalog UI."""

    def test_idle_is_blank(self):
        assert render_state(RetryState()) == ""

    def test_in_flight(self):
        assert "attempt 2" in render_state(RetryState(phase=Phase.IN_FLIGHT, attempt=2))

    def test_countdown(self):
        text = render_state(RetryState(phase=Phase.COUNTING_DOWN, wait_seconds=10, remaining_seconds=5))
        assert "5" in text
        assert "50%" in text

    def test_done(self):
        text = render_state(RetryState(phase=Phase.DONE, text="connections"))
        assert text.startswith(RESULT_TITLE)
        assert text.endswith("connections")

    def test_failed_shows_guidance_not_details(self):
        text = render_state(RetryState(phase=Phase.FAILED, error="Gemini API error"))
        assert ERROR_GUIDANCE in text
        assert "Gemini API error" not in text


class TestProgressBar:
    def test_full_and_empty(self):
        assert progress_bar(100, width=4) == "[####] 100%"
        assert progress_bar(0, width=4) == "[----] 0%"


class TestMain:
    """Argument and input validation (no network)."""

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 2
        assert "Could not read courses" in capsys.readouterr().err

    def test_too_few_courses(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text(json.dumps([{"CourseName": "Only one"}]), encoding="utf-8")
        assert main([str(path)]) == 2

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text(json.dumps({"CourseName": "x"}), encoding="utf-8")
        assert main([str(path)]) == 2
