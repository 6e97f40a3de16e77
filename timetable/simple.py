# timetable/simple.py
"""
Простой понедельный генератор (жадная эвристика без балансировки).

Число пар в неделю берётся из hours_per_unit предмета. Слоты, нарушающие
пожелание, не запрещены, а лишь ставятся в конец очереди.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .assignments import pairs_per_week_from_unit
from .config import GeneratorConfig
from .context import group_slot, teacher_slot
from .matching import PreferenceIndex, TeacherIndex, subjects_for_group
from .model import (
    GenerationInput,
    Group,
    Lesson,
    SemesterSchedule,
    SkipEvent,
    Subject,
    Teacher,
    WeeklySchedule,
    new_id,
)
from .preferences import PreferenceRules, classify_simple, parse_preference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Obligation:
    group: Group
    subject: Subject
    teacher: Teacher
    rules: Optional[PreferenceRules]
    pairs_per_week: int


def _collect_obligations(
    data: GenerationInput,
    cfg: GeneratorConfig,
    teacher_index: TeacherIndex,
    preference_index: PreferenceIndex,
) -> Tuple[List[_Obligation], List[SkipEvent]]:
    obligations: List[_Obligation] = []
    skips: List[SkipEvent] = []
    for group in data.groups:
        group_subjects = subjects_for_group(group, data.subjects)
        if not group_subjects:
            msg = f"Группа {group.name} не найдена в дисциплинах. Проверьте поле \"Группы\" в дисциплинах."
            logger.info(msg)
            skips.append(SkipEvent("group_without_subjects", msg, group_name=group.name))
            continue

        for subject in group_subjects:
            teacher = teacher_index.resolve(subject.teacher_name)
            if teacher is None:
                msg = (
                    f"Преподаватель не найден: \"{subject.teacher_name}\" для дисциплины "
                    f"\"{subject.name}\". Проверьте ФИО в списке преподавателей."
                )
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

            preference = preference_index.lookup(teacher)
            obligations.append(
                _Obligation(
                    group=group,
                    subject=subject,
                    teacher=teacher,
                    rules=parse_preference(preference.schedule_preference) if preference else None,
                    pairs_per_week=pairs_per_week_from_unit(subject.hours_per_unit, cfg.hours_per_pair),
                )
            )
    return obligations, skips


def _place_week(week: int, obligations: List[_Obligation], room_id: str, cfg: GeneratorConfig) -> Tuple[List[Lesson], List[_Obligation]]:
    lessons: List[Lesson] = []
    empty: List[_Obligation] = []
    occupied = set()

    for ob in obligations:
        candidates = []
        for weekday in cfg.weekdays:
            for pair in range(1, cfg.pairs_per_day + 1):
                if teacher_slot(weekday, pair, ob.teacher.id) in occupied:
                    continue
                if group_slot(weekday, pair, ob.group.id) in occupied:
                    continue
                satisfies, violates = classify_simple(ob.rules, weekday, pair)
                candidates.append((weekday, pair, satisfies, violates))

        # удовлетворяющие пожеланию первыми, нарушающие в конце
        candidates.sort(key=lambda c: (not c[2], c[3]))

        placed = 0
        for weekday, pair, _, _ in candidates:
            if placed >= ob.pairs_per_week:
                break
            lesson = Lesson(
                id=new_id("l"),
                week_index=week,
                weekday=weekday,
                pair_index=pair,
                group_id=ob.group.id,
                subject_id=ob.subject.id,
                teacher_id=ob.teacher.id,
                room_id=room_id,
            )
            lessons.append(lesson)
            occupied.add(teacher_slot(weekday, pair, ob.teacher.id))
            occupied.add(group_slot(weekday, pair, ob.group.id))
            placed += 1

        if placed == 0:
            empty.append(ob)

    return lessons, empty


def generate_week_by_week(
    data: GenerationInput,
    cfg: GeneratorConfig,
    teacher_index: TeacherIndex,
    preference_index: PreferenceIndex,
) -> Tuple[SemesterSchedule, List[SkipEvent]]:
    obligations, skips = _collect_obligations(data, cfg, teacher_index, preference_index)
    room_id = data.rooms[0].id

    weeks: List[WeeklySchedule] = []
    reported = set()
    for week in range(1, data.semester_weeks + 1):
        lessons, empty = _place_week(week, obligations, room_id, cfg)
        for ob in empty:
            key = (ob.group.id, ob.subject.id)
            if key in reported:
                continue
            reported.add(key)
            msg = f"Не удалось разместить ни одной пары для дисциплины \"{ob.subject.name}\" группы \"{ob.group.name}\""
            logger.warning(msg)
            skips.append(
                SkipEvent(
                    "underplaced",
                    msg,
                    group_name=ob.group.name,
                    subject_name=ob.subject.name,
                    teacher_name=ob.teacher.full_name,
                    missing_pairs=ob.pairs_per_week,
                )
            )
        weeks.append(WeeklySchedule(id=new_id("w"), week_index=week, lessons=lessons))

    schedule = SemesterSchedule(id=new_id("sched"), semester_label=cfg.semester_label, weeks=weeks)
    return schedule, skips
