"""Проверка входных данных перед генерацией (фатальные ошибки)."""
from typing import List

from .model import GenerationInput


class ValidationError(ValueError):
    def __init__(self, missing: List[str], message: str):
        super().__init__(message)
        self.missing = missing


_REQUIRED = (
    ("teachers", "преподаватели"),
    ("groups", "группы"),
    ("subjects", "предметы"),
    ("rooms", "аудитории"),
)


def validate_input(data: GenerationInput) -> None:
    missing = [attr for attr, _ in _REQUIRED if not getattr(data, attr, None)]
    problems = [label for attr, label in _REQUIRED if attr in missing]

    weeks = getattr(data, "semester_weeks", 0)
    if not isinstance(weeks, int) or weeks < 1:
        missing.append("semester_weeks")
        problems.append(f"число недель семестра ({weeks!r})")

    if missing:
        raise ValidationError(
            missing,
            "Невозможно составить расписание, не заданы: " + ", ".join(problems),
        )
