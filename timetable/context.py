# timetable/context.py
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import DefaultDict, Dict, Iterable, List, Optional, Set, Tuple

from .config import GeneratorConfig
from .model import Assignment, EntityId, Group, Lesson, Room, TeacherPreference
from .preferences import PreferenceRules, rules_for

SlotKey = Tuple[int, int, str, EntityId]


def teacher_slot(weekday: int, pair: int, teacher_id: EntityId) -> SlotKey:
    return (weekday, pair, "t", teacher_id)


def group_slot(weekday: int, pair: int, group_id: EntityId) -> SlotKey:
    return (weekday, pair, "g", group_id)


@dataclass
class SchedulerContext:
    """
    Всё изменяемое состояние одного запуска генерации.

    Создаётся заново на каждый вызов и принадлежит только ему.
    """
    cfg: GeneratorConfig
    groups: List[Group]
    teacher_count: int
    room: Optional[Room]
    group_required: Dict[EntityId, int] = field(default_factory=dict)
    occupied: Set[SlotKey] = field(default_factory=set)
    group_placed: DefaultDict[EntityId, int] = field(default_factory=lambda: defaultdict(int))
    placed: DefaultDict[Tuple[EntityId, EntityId], int] = field(default_factory=lambda: defaultdict(int))
    teacher_load: DefaultDict[EntityId, int] = field(default_factory=lambda: defaultdict(int))
    day_load: DefaultDict[int, int] = field(default_factory=lambda: defaultdict(int))
    week_lessons: List[Lesson] = field(default_factory=list)
    deadline: Optional[float] = None
    passes_run: int = 0
    _rules: Dict[TeacherPreference, PreferenceRules] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        assignments: Iterable[Assignment],
        groups: List[Group],
        teacher_count: int,
        rooms: List[Room],
        cfg: GeneratorConfig,
    ) -> "SchedulerContext":
        ctx = cls(
            cfg=cfg,
            groups=list(groups),
            teacher_count=teacher_count,
            room=rooms[0] if rooms else None,
        )
        for a in assignments:
            ctx.group_required[a.group.id] = ctx.group_required.get(a.group.id, 0) + a.required_pairs_per_week
        if cfg.time_limit_sec is not None:
            ctx.deadline = time.perf_counter() + cfg.time_limit_sec
        return ctx

    # --- Занятость ---
    def is_free(self, weekday: int, pair: int, teacher_id: EntityId, group_id: EntityId) -> bool:
        return (
            teacher_slot(weekday, pair, teacher_id) not in self.occupied
            and group_slot(weekday, pair, group_id) not in self.occupied
        )

    def occupy(self, lesson: Lesson, assignment: Assignment) -> None:
        self.occupied.add(teacher_slot(lesson.weekday, lesson.pair_index, lesson.teacher_id))
        self.occupied.add(group_slot(lesson.weekday, lesson.pair_index, lesson.group_id))
        self.week_lessons.append(lesson)
        self.group_placed[lesson.group_id] += 1
        self.placed[assignment.key] += 1
        self.teacher_load[lesson.teacher_id] += 1
        self.day_load[lesson.weekday] += 1

    # --- Прогресс ---
    def placed_for(self, assignment: Assignment) -> int:
        return self.placed.get(assignment.key, 0)

    def remaining(self, assignment: Assignment) -> int:
        return assignment.required_pairs_per_week - self.placed_for(assignment)

    def group_progress(self, group_id: EntityId) -> float:
        total = self.group_required.get(group_id, 0)
        return self.group_placed.get(group_id, 0) / total if total > 0 else 0.0

    def average_progress(self) -> float:
        if not self.groups:
            return 0.0
        return sum(self.group_progress(g.id) for g in self.groups) / len(self.groups)

    def all_placed(self, assignments: Iterable[Assignment]) -> bool:
        return all(self.remaining(a) <= 0 for a in assignments)

    def deadline_passed(self) -> bool:
        return self.deadline is not None and time.perf_counter() > self.deadline

    def rules(self, preference: Optional[TeacherPreference]) -> PreferenceRules:
        if preference is None:
            return rules_for(None)
        if preference not in self._rules:
            self._rules[preference] = rules_for(preference)
        return self._rules[preference]
