# timetable/statistics.py
"""
Статистика по готовому расписанию.

Считается только по итоговому набору занятий: конфликты заново
проигрываются по неделям и не зависят от учёта занятости в планировщике.
"""
import math
from collections import defaultdict
from typing import Dict, List, Set, Tuple

import numpy as np

from .config import GeneratorConfig
from .context import group_slot, teacher_slot
from .matching import PreferenceIndex
from .model import (
    GenerationInput,
    GroupLoad,
    SemesterSchedule,
    Statistics,
    TeacherSatisfaction,
)
from .preferences import is_satisfied, rules_for


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    """Процент с округлением; 100, если знаменатель нулевой."""
    return round_half_up(part / whole * 100) if whole > 0 else 100


def count_conflicts(schedule: SemesterSchedule) -> int:
    conflicts: Set[Tuple] = set()
    for week in schedule.weeks:
        seen: Set[Tuple] = set()
        for lesson in week.lessons:
            t_key = teacher_slot(lesson.weekday, lesson.pair_index, lesson.teacher_id)
            g_key = group_slot(lesson.weekday, lesson.pair_index, lesson.group_id)
            if t_key in seen or g_key in seen:
                conflicts.add((week.week_index,) + t_key)
                conflicts.add((week.week_index,) + g_key)
            seen.add(t_key)
            seen.add(g_key)
    return len(conflicts)


def load_balance_score(loads: List[int]) -> int:
    """100 - коэффициент вариации нагрузки в процентах, не меньше 0."""
    if not loads:
        return 100
    arr = np.asarray(loads, dtype=float)
    mean = float(arr.mean())
    if mean <= 0:
        return 100
    std = float(arr.std())
    return max(0, 100 - round_half_up(std / mean * 100))


def compute_statistics(
    schedule: SemesterSchedule,
    data: GenerationInput,
    cfg: GeneratorConfig,
    preference_index: PreferenceIndex,
) -> Statistics:
    lessons = schedule.all_lessons()
    teachers_by_id = {t.id: t for t in data.teachers}
    groups_by_id = {g.id: g for g in data.groups}

    # Удовлетворённость по преподавателям (в порядке первой встречи)
    per_teacher: Dict[str, List[int]] = {}
    satisfied_prefs = total_prefs = 0
    rules_cache = {}
    for lesson in lessons:
        teacher = teachers_by_id.get(lesson.teacher_id)
        if teacher is None:
            continue
        counts = per_teacher.setdefault(teacher.full_name, [0, 0])
        preference = preference_index.lookup(teacher)
        if preference is None:
            counts[0] += 1
            counts[1] += 1
            continue

        if teacher.id not in rules_cache:
            rules_cache[teacher.id] = rules_for(preference)
        ok = is_satisfied(rules_cache[teacher.id], lesson.weekday, lesson.pair_index)
        counts[0] += int(ok)
        counts[1] += 1
        satisfied_prefs += int(ok)
        total_prefs += 1

    teacher_satisfaction = [
        TeacherSatisfaction(teacher_name=name, satisfied=s, total=t, rate=percent(s, t))
        for name, (s, t) in per_teacher.items()
    ]

    teacher_loads: Dict[str, int] = defaultdict(int)
    group_counts: Dict[str, int] = defaultdict(int)
    for lesson in lessons:
        teacher_loads[lesson.teacher_id] += 1
        group_counts[lesson.group_id] += 1

    group_loads = [
        GroupLoad(
            group_name=groups_by_id[gid].name if gid in groups_by_id else "Неизвестная группа",
            lessons=n,
            hours=n * cfg.hours_per_pair,
        )
        for gid, n in group_counts.items()
    ]

    first_week = schedule.weeks[0].lessons if schedule.weeks else []
    return Statistics(
        total_lessons=len(lessons),
        satisfied_preferences=satisfied_prefs,
        total_preferences=total_prefs,
        conflicts=count_conflicts(schedule),
        satisfaction_rate=percent(satisfied_prefs, total_prefs),
        teacher_load_balance=load_balance_score(list(teacher_loads.values())),
        teacher_satisfaction=teacher_satisfaction,
        group_loads=group_loads,
        lessons_per_week=len(first_week),
    )
