# timetable/scoring.py
from dataclasses import dataclass
from typing import List

from .context import SchedulerContext
from .model import Assignment
from .preferences import preference_score


@dataclass(frozen=True)
class CandidateSlot:
    weekday: int
    pair: int
    score: int


def group_balance_term(ctx: SchedulerContext, group_id: str) -> int:
    cfg = ctx.cfg
    progress = ctx.group_progress(group_id)
    avg = ctx.average_progress()
    if progress < avg - cfg.group_strong_gap:
        return cfg.weight_group_far_behind
    if progress < avg - cfg.group_gap:
        return cfg.weight_group_behind
    if progress > avg + cfg.group_strong_gap:
        return cfg.weight_group_far_ahead
    if progress > avg + cfg.group_gap:
        return cfg.weight_group_ahead
    return 0


def teacher_balance_term(ctx: SchedulerContext, teacher_id: str) -> int:
    cfg = ctx.cfg
    load = ctx.teacher_load.get(teacher_id, 0)
    mean = len(ctx.week_lessons) / max(1, ctx.teacher_count)
    if load < mean * cfg.teacher_low_ratio:
        return cfg.weight_teacher_underloaded
    if load > mean * cfg.teacher_high_ratio:
        return cfg.weight_teacher_overloaded
    return 0


def day_balance_term(ctx: SchedulerContext, weekday: int) -> int:
    cfg = ctx.cfg
    count = ctx.day_load.get(weekday, 0)
    mean = len(ctx.week_lessons) / len(cfg.weekdays)
    if count < mean * cfg.day_low_ratio:
        return cfg.weight_day_underloaded
    if count > mean * cfg.day_high_ratio:
        return cfg.weight_day_overloaded
    return 0


def score_slot(ctx: SchedulerContext, assignment: Assignment, weekday: int, pair: int) -> int:
    rules = ctx.rules(assignment.preference)
    return (
        ctx.cfg.base_score
        + preference_score(rules, weekday, pair, ctx.cfg)
        + group_balance_term(ctx, assignment.group.id)
        + teacher_balance_term(ctx, assignment.teacher.id)
        + day_balance_term(ctx, weekday)
    )


def is_hard_violation(ctx: SchedulerContext, score: int) -> bool:
    return score < ctx.cfg.hard_violation_threshold


def rank_candidates(ctx: SchedulerContext, assignment: Assignment) -> List[CandidateSlot]:
    """Свободные слоты недели для назначения, лучшие первыми."""
    candidates: List[CandidateSlot] = []
    for weekday in ctx.cfg.weekdays:
        for pair in range(1, ctx.cfg.pairs_per_day + 1):
            if not ctx.is_free(weekday, pair, assignment.teacher.id, assignment.group.id):
                continue
            candidates.append(CandidateSlot(weekday, pair, score_slot(ctx, assignment, weekday, pair)))
    # сортировка устойчивая: при равной оценке порядок день -> пара сохраняется
    candidates.sort(key=lambda c: c.score, reverse=True)
    return candidates
