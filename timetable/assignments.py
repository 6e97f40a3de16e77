# timetable/assignments.py
import logging
import math
from typing import List, Tuple

from .config import GeneratorConfig
from .matching import PreferenceIndex, TeacherIndex, subjects_for_group
from .model import Assignment, GenerationInput, SkipEvent

logger = logging.getLogger(__name__)


def required_pairs_per_week(total_hours: float, semester_weeks: int, hours_per_pair: int = 2) -> int:
    """Пар в неделю: часы семестра / недели / 2 часа на пару, минимум одна."""
    hours_per_week = total_hours / semester_weeks
    return max(1, math.ceil(hours_per_week / hours_per_pair))


def pairs_per_week_from_unit(hours_per_unit: float, hours_per_pair: int = 2) -> int:
    return max(1, math.ceil((hours_per_unit or 0) / hours_per_pair))


def derive_assignments(
    data: GenerationInput,
    cfg: GeneratorConfig,
    teacher_index: TeacherIndex,
    preference_index: PreferenceIndex,
) -> Tuple[List[Assignment], List[SkipEvent]]:
    assignments: List[Assignment] = []
    skips: List[SkipEvent] = []

    for group in data.groups:
        group_subjects = subjects_for_group(group, data.subjects)
        if not group_subjects:
            msg = f"Группа {group.name} не найдена в дисциплинах. Проверьте поле \"Группы\" в дисциплинах."
            logger.info(msg)
            skips.append(SkipEvent("group_without_subjects", msg, group_name=group.name))
            continue

        for subject in group_subjects:
            if not subject.total_hours or subject.total_hours <= 0:
                msg = (
                    f"Предмет \"{subject.name}\" для группы \"{group.name}\" "
                    f"не имеет часов (total_hours={subject.total_hours})"
                )
                logger.warning(msg)
                skips.append(SkipEvent("no_hours", msg, group_name=group.name, subject_name=subject.name))
                continue

            teacher = teacher_index.resolve(subject.teacher_name)
            if teacher is None:
                msg = f"Преподаватель \"{subject.teacher_name}\" для предмета \"{subject.name}\" не найден"
                logger.warning(msg)
                skips.append(
                    SkipEvent(
                        "teacher_not_found",
                        msg,
                        group_name=group.name,
                        subject_name=subject.name,
                        teacher_name=subject.teacher_name,
                    )
                )
                continue

            assignments.append(
                Assignment(
                    group=group,
                    subject=subject,
                    teacher=teacher,
                    preference=preference_index.lookup(teacher),
                    required_pairs_per_week=required_pairs_per_week(
                        subject.total_hours, data.semester_weeks, cfg.hours_per_pair
                    ),
                )
            )

    logger.info(f"Всего назначений: {len(assignments)} для {len(data.groups)} групп")
    return assignments, skips
