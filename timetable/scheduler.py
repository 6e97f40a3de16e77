# timetable/scheduler.py
"""
Итеративное жадное размещение одной типичной недели.

За проход назначения сортируются по приоритету, каждое занимает лучшие по
оценке свободные слоты. Проходы повторяются, пока что-то остаётся не
размещённым (не более max_iterations). Готовая неделя копируется на все
недели семестра.
"""
import logging
from dataclasses import replace
from functools import cmp_to_key
from typing import Dict, List

from .config import GeneratorConfig
from .context import SchedulerContext
from .model import (
    Assignment,
    GenerationInput,
    Lesson,
    SemesterSchedule,
    SkipEvent,
    WeeklySchedule,
    new_id,
)
from .scoring import is_hard_violation, rank_candidates

logger = logging.getLogger(__name__)

PROGRESS_TOLERANCE = 0.001


def _priority_comparator(ctx: SchedulerContext, group_order: Dict[str, int]):
    def compare(a: Assignment, b: Assignment) -> int:
        # 1. Преподаватели с пожеланиями первыми
        if a.preference is not None and b.preference is None:
            return -1
        if a.preference is None and b.preference is not None:
            return 1

        # 2. Менее заполненные группы первыми
        progress_a = ctx.group_progress(a.group.id)
        progress_b = ctx.group_progress(b.group.id)
        if abs(progress_a - progress_b) > PROGRESS_TOLERANCE:
            return -1 if progress_a < progress_b else 1

        # 3. Меньше занятий уже стоит
        load_a = ctx.group_placed.get(a.group.id, 0)
        load_b = ctx.group_placed.get(b.group.id, 0)
        if load_a != load_b:
            return load_a - load_b

        # 4. Порядок объявления групп
        return group_order.get(a.group.id, -1) - group_order.get(b.group.id, -1)

    return compare


def sort_pending(ctx: SchedulerContext, assignments: List[Assignment]) -> List[Assignment]:
    group_order = {}
    for idx, g in enumerate(ctx.groups):
        group_order.setdefault(g.id, idx)
    pending = [a for a in assignments if ctx.remaining(a) > 0]
    return sorted(pending, key=cmp_to_key(_priority_comparator(ctx, group_order)))


def place_assignment(ctx: SchedulerContext, assignment: Assignment) -> int:
    """Ставит недостающие пары назначения в лучшие слоты, возвращает сколько поставлено."""
    remaining = ctx.remaining(assignment)
    if remaining <= 0:
        return 0
    if ctx.room is None:
        return 0

    placed = 0
    for slot in rank_candidates(ctx, assignment):
        if placed >= remaining:
            break

        if is_hard_violation(ctx, slot.score):
            logger.debug(
                f"Пропущен слот {slot.weekday}-{slot.pair} для {assignment.group.name} "
                f"({assignment.subject.name}): нарушает требования преподавателя "
                f"{assignment.teacher.full_name} (оценка {slot.score})"
            )
            continue

        if not ctx.is_free(slot.weekday, slot.pair, assignment.teacher.id, assignment.group.id):
            continue

        lesson = Lesson(
            id=new_id("l"),
            week_index=1,  # заменяется при копировании на семестр
            weekday=slot.weekday,
            pair_index=slot.pair,
            group_id=assignment.group.id,
            subject_id=assignment.subject.id,
            teacher_id=assignment.teacher.id,
            room_id=ctx.room.id,
        )
        ctx.occupy(lesson, assignment)
        placed += 1

    return placed


def place_representative_week(
    assignments: List[Assignment],
    data: GenerationInput,
    cfg: GeneratorConfig,
) -> SchedulerContext:
    ctx = SchedulerContext.create(assignments, data.groups, len(data.teachers), data.rooms, cfg)

    for iteration in range(cfg.max_iterations):
        pending = sort_pending(ctx, assignments)
        if not pending:
            break
        ctx.passes_run = iteration + 1

        placed_in_pass = 0
        for assignment in pending:
            if ctx.deadline_passed():
                logger.warning(
                    f"Превышен лимит времени {cfg.time_limit_sec}s на проходе {iteration + 1}, "
                    f"неделя размещена частично"
                )
                return ctx
            placed_in_pass += place_assignment(ctx, assignment)

        logger.debug(f"Проход {iteration + 1}: размещено {placed_in_pass}, ожидало {len(pending)} назначений")
        if ctx.all_placed(assignments):
            break

    return ctx


def underplaced_events(ctx: SchedulerContext, assignments: List[Assignment]) -> List[SkipEvent]:
    events: List[SkipEvent] = []
    for a in assignments:
        missing = ctx.remaining(a)
        if missing <= 0:
            continue
        msg = (
            f"Не удалось разместить {missing} из {a.required_pairs_per_week} пар: "
            f"группа {a.group.name}, предмет {a.subject.name}, преподаватель {a.teacher.full_name}"
        )
        logger.warning(msg)
        events.append(
            SkipEvent(
                "underplaced",
                msg,
                group_name=a.group.name,
                subject_name=a.subject.name,
                teacher_name=a.teacher.full_name,
                missing_pairs=missing,
            )
        )
    return events


def replicate_week(week_lessons: List[Lesson], semester_weeks: int, label: str) -> SemesterSchedule:
    weeks: List[WeeklySchedule] = []
    for week in range(1, semester_weeks + 1):
        copies = [replace(lesson, id=new_id("l"), week_index=week) for lesson in week_lessons]
        weeks.append(WeeklySchedule(id=new_id("w"), week_index=week, lessons=copies))
    return SemesterSchedule(id=new_id("sched"), semester_label=label, weeks=weeks)
