from typing import Optional

from nebresult.config.settings import settings


def format_gpa(gpa: Optional[float]) -> str:
    if not gpa:
        return settings.not_graded_label
    return f"{gpa:.{settings.gpa_decimals}f}"


def format_grade_point(point: Optional[float]) -> str:
    if point is None:
        return "N/A"
    return f"{point:.{settings.gp_decimals}f}"


def format_marks(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
