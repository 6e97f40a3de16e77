"""
Сопоставление названий: группа -> предметы, сырое ФИО -> преподаватель.

Группы сопоставляются по вхождению подстроки в обе стороны. Неразрешённые
имена возвращаются вызывающему как предупреждения.
"""
from typing import Dict, Iterable, List, Optional

from .model import Group, Subject, Teacher, TeacherPreference

GROUP_SEPARATORS = (",", " ", ";", "\n", "\t")


def normalize_name(text: Optional[str]) -> str:
    return (text or "").lower().strip()


def _split_tokens(raw: str) -> List[str]:
    parts = [raw]
    for sep in GROUP_SEPARATORS:
        parts = [p.strip() for chunk in parts for p in chunk.split(sep)]
        parts = [p for p in parts if p]
    return parts


def group_matches_subject(group_name: str, subject_groups_raw: str) -> bool:
    group_key = normalize_name(group_name)
    raw = (subject_groups_raw or "").lower()

    if raw == group_key:
        return True

    tokens = _split_tokens(raw)
    if group_key in tokens:
        return True
    for token in tokens:
        if group_key in token or token in group_key:
            return True

    return group_key in raw


def subjects_for_group(group: Group, subjects: Iterable[Subject]) -> List[Subject]:
    return [s for s in subjects if group_matches_subject(group.name, s.groups)]


class TeacherIndex:
    """
    Индекс преподавателей по нормализованному ФИО.

    Порядок обхода = порядок объявления преподавателей. Когда нечёткому
    поиску подходят несколько записей, выигрывает первая по этому порядку.
    Пустое имя входит в любой ключ и поэтому даёт первого преподавателя.
    """

    def __init__(self, teachers: Iterable[Teacher]):
        self._by_key: Dict[str, Teacher] = {}
        for t in teachers:
            self._by_key[normalize_name(t.full_name)] = t

    def __len__(self) -> int:
        return len(self._by_key)

    def exact(self, raw_name: str) -> Optional[Teacher]:
        return self._by_key.get(normalize_name(raw_name))

    def resolve(self, raw_name: str) -> Optional[Teacher]:
        name = normalize_name(raw_name)
        teacher = self.exact(name)
        if teacher:
            return teacher

        # Фамилия (первый токен) против первого токена ключа
        parts = name.split()
        if parts:
            surname = parts[0]
            for key, t in self._by_key.items():
                key_first = key.split()[0] if key.split() else ""
                if key_first == surname or surname in key or key_first in surname:
                    return t

        # Любое вхождение одной строки в другую
        for key, t in self._by_key.items():
            if key in name or name in key:
                return t

        return None


class PreferenceIndex:
    """Пожелание преподавателя по ФИО; используется первая запись на имя."""

    def __init__(self, preferences: Iterable[TeacherPreference]):
        self._by_key: Dict[str, TeacherPreference] = {}
        for p in preferences:
            self._by_key.setdefault(normalize_name(p.teacher_full_name), p)

    def __len__(self) -> int:
        return len(self._by_key)

    def lookup(self, teacher: Teacher) -> Optional[TeacherPreference]:
        return self._by_key.get(normalize_name(teacher.full_name))

