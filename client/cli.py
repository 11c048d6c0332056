"""
Integration Finder terminal client.

Reads 2-4 courses from a JSON file (catalog rows with CourseName /
RationaleAbstract columns), asks the server for integrations and renders the
retry state the same way the catalog UI does: busy notice, countdown with a
progress bar while every key is rate-limited, then the result or an error.

Usage:
  python -m client.cli courses.json --url http://localhost:8000/api/gemini
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from config import Config

from .courses import MAX_COURSES, MIN_COURSES, Course, can_generate
from .scheduler import Phase, RetryScheduler, RetryState
from .service import IntegrationClient

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "הבינה המלאכותית חושבת... תהליך זה עשוי לקחת מספר רגעים."
RATE_LIMIT_MESSAGE = "⚠️ המערכת עמוסה כרגע. ניסיון נוסף יתבצע בעוד {seconds} שניות..."
ERROR_TITLE = "שגיאה"
ERROR_GUIDANCE = "אירעה שגיאה ביצירת החיבורים. אנא נסה שוב מאוחר יותר."
RESULT_TITLE = "אינטגרציות מוצעות"
SELECTION_HINT = f"יש לבחור {MIN_COURSES}-{MAX_COURSES} קורסים על מנת להפיק חיבורים."

BAR_WIDTH = 20


def progress_bar(percent: int, width: int = BAR_WIDTH) -> str:
    filled = round(width * percent / 100)
    return "[" + "#" * filled + "-" * (width - filled) + f"] {percent}%"


def render_state(state: RetryState) -> str:
    """Plain-text rendering of one scheduler snapshot."""
    if state.phase is Phase.DONE:
        return f"{RESULT_TITLE}\n\n{state.text}"

    if state.phase is Phase.FAILED:
        return f"{ERROR_TITLE}\n{ERROR_GUIDANCE}"

    if state.phase is Phase.COUNTING_DOWN:
        seconds = state.remaining_seconds if state.remaining_seconds is not None else state.wait_seconds
        return (
            f"{RATE_LIMIT_MESSAGE.format(seconds=seconds)}\n"
            f"{progress_bar(state.progress_percent)}"
        )

    if state.phase is Phase.IN_FLIGHT:
        return f"{BUSY_MESSAGE} (attempt {state.attempt})"

    return ""


def load_courses(path: Path) -> List[Course]:
    with path.open(encoding="utf-8") as fh:
        rows = json.load(fh)
    if not isinstance(rows, list):
        raise ValueError("Expected a JSON list of courses")
    return [Course.model_validate(row) for row in rows]


async def run(courses: List[Course], api_url: str, tick_seconds: float = 1.0) -> RetryState:
    """Run one generation cycle to completion, printing every state change."""
    client = IntegrationClient(api_url)
    scheduler = RetryScheduler(
        client.generate_integration,
        tick_seconds=tick_seconds,
        on_change=lambda state: print(render_state(state), flush=True),
    )
    try:
        await scheduler.begin_generation(courses)
        return await scheduler.wait()
    finally:
        scheduler.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Find integrations between 2-4 courses")
    parser.add_argument("courses", type=Path, help="JSON file with a list of course rows")
    parser.add_argument("--url", default=Config.INTEGRATIONS_API_URL, help="Integration endpoint URL")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        courses = load_courses(args.courses)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Could not read courses: {e}", file=sys.stderr)
        return 2

    if not can_generate(courses):
        print(SELECTION_HINT, file=sys.stderr)
        return 2

    state = asyncio.run(run(courses, args.url))
    return 0 if state.phase is Phase.DONE else 1


if __name__ == "__main__":
    sys.exit(main())
