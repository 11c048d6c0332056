"""
Course records and the integration prompt.

Course rows come from the catalog sheet with PascalCase column names; only
the name and rationale abstract feed the prompt. The prompt is opaque to the
server: the dispatcher never looks inside it.
"""

from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field

MIN_COURSES = 2
MAX_COURSES = 4

ONLINE_FORMAT_MARKER = "מקוון"

PROMPT_HEADER = (
    "על בסיס הרציונלים של הקורסים הבאים, נסח 2-4 משפטים בלבד המבטאים חיבורים "
    "אינטלקטואליים, רעיוניים או יישומיים אפשריים בין תחומי הדעת שלהם. "
    "הקפד על שפה אקדמית רהוטה וקצרה.\n\n"
)


class Course(BaseModel):
    """A catalog course (only the fields the integration finder uses are required)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    course_id: str = Field("", alias="CourseID")
    course_name: str = Field(..., alias="CourseName")
    rationale_abstract: str = Field("", alias="RationaleAbstract")
    lecturer_name: List[str] = Field(default_factory=list, alias="LecturerName")
    course_format: str = Field("", alias="CourseFormat")

    @property
    def display_name(self) -> str:
        """Online courses are shown with a leading '@'."""
        if ONLINE_FORMAT_MARKER in self.course_format:
            return f"@ {self.course_name}"
        return self.course_name


def can_generate(courses: Sequence[Course]) -> bool:
    return courses is not None and MIN_COURSES <= len(courses) <= MAX_COURSES


def build_prompt(courses: Sequence[Course]) -> str:
    prompt = PROMPT_HEADER
    for index, course in enumerate(courses, start=1):
        prompt += f"--- קורס {index} ---\n"
        prompt += f"שם הקורס: {course.course_name}\n"
        prompt += f"רציונל ותקציר: {course.rationale_abstract}\n\n"
    return prompt
