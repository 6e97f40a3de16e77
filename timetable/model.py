# timetable/model.py
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

EntityId = str
Weekday = int
PairIdx = int


def new_id(prefix: str) -> EntityId:
    return f"{prefix}-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class Teacher:
    id: EntityId
    full_name: str              # ключ сопоставления
    short_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_online: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class Group:
    id: EntityId
    name: str                   # например "1ИТ1.9.25"
    faculty: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class Subject:
    id: EntityId
    direction: str              # вкладка: "1 курс", "Маркетинг", "Дизайн", "ИСИП"
    name: str
    total_hours: float          # часы на весь семестр
    hours_per_unit: float       # часы в неделю (простой вариант)
    groups: str                 # сырая строка с группами
    teacher_name: str           # сырое ФИО преподавателя
    week21: Optional[str] = None
    course: Optional[str] = None


@dataclass(frozen=True)
class Room:
    id: EntityId
    number: str
    type: str                   # "комп", "лекц", "ноут", "диз", "other"
    capacity: Optional[int] = None
    additional_type: Optional[str] = None


@dataclass(frozen=True)
class TeacherPreference:
    teacher_full_name: str
    schedule_preference: str    # "ВТ 3-4 пары", "Не занимать ВТ и ЧТ", ...
    id: Optional[EntityId] = None


@dataclass(frozen=True)
class Assignment:
    # Обязательство: группа + предмет + преподаватель и сколько пар в неделю
    group: Group
    subject: Subject
    teacher: Teacher
    preference: Optional[TeacherPreference]
    required_pairs_per_week: int

    @property
    def key(self) -> Tuple[EntityId, EntityId]:
        return (self.group.id, self.subject.id)


@dataclass(frozen=True)
class Lesson:
    id: EntityId
    week_index: int             # 1..semester_weeks
    weekday: Weekday            # 1=ПН .. 5=ПТ
    pair_index: PairIdx         # 1..4
    group_id: EntityId
    subject_id: EntityId
    teacher_id: EntityId
    room_id: EntityId

    def slot_signature(self) -> Tuple:
        """Занятие без идентичности и номера недели (для сравнения недель)."""
        return (
            self.weekday,
            self.pair_index,
            self.group_id,
            self.subject_id,
            self.teacher_id,
            self.room_id,
        )


@dataclass
class WeeklySchedule:
    id: EntityId
    week_index: int
    lessons: List[Lesson] = field(default_factory=list)


@dataclass
class SemesterSchedule:
    id: EntityId
    semester_label: str
    weeks: List[WeeklySchedule] = field(default_factory=list)

    def all_lessons(self) -> List[Lesson]:
        return [lesson for week in self.weeks for lesson in week.lessons]


@dataclass
class GenerationInput:
    teachers: List[Teacher]
    groups: List[Group]
    subjects: List[Subject]
    rooms: List[Room]
    preferences: List[TeacherPreference] = field(default_factory=list)
    semester_weeks: int = 21


@dataclass(frozen=True)
class SkipEvent:
    # kind: no_hours | teacher_not_found | group_without_subjects | underplaced
    kind: str
    message: str
    group_name: Optional[str] = None
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None
    missing_pairs: int = 0


@dataclass
class TeacherSatisfaction:
    teacher_name: str
    satisfied: int
    total: int
    rate: int


@dataclass
class GroupLoad:
    group_name: str
    lessons: int
    hours: int


@dataclass
class Statistics:
    total_lessons: int
    satisfied_preferences: int
    total_preferences: int
    conflicts: int
    satisfaction_rate: int
    teacher_load_balance: int
    teacher_satisfaction: List[TeacherSatisfaction] = field(default_factory=list)
    group_loads: List[GroupLoad] = field(default_factory=list)
    lessons_per_week: int = 0
    underplaced_pairs: int = 0


@dataclass
class GenerationResult:
    schedule: SemesterSchedule
    stats: Statistics
    warnings: List[SkipEvent] = field(default_factory=list)
