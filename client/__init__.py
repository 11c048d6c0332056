"""
Integration Finder client side.

Builds the prompt from the selected courses, calls /api/gemini and keeps
retrying with a visible countdown while every server key is rate-limited.
"""

from .courses import Course, MAX_COURSES, MIN_COURSES, build_prompt, can_generate
from .service import IntegrationClient, IntegrationServiceError
from .scheduler import Phase, RetryScheduler, RetryState

__all__ = [
    "Course",
    "MIN_COURSES",
    "MAX_COURSES",
    "build_prompt",
    "can_generate",
    "IntegrationClient",
    "IntegrationServiceError",
    "Phase",
    "RetryScheduler",
    "RetryState",
]
