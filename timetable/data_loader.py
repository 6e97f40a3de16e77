# timetable/data_loader.py
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from .model import GenerationInput, Group, Room, Subject, Teacher, TeacherPreference

PREFERENCE_COLUMNS = ["teacher_full_name", "schedule_preference"]


@dataclass(frozen=True)
class DataBundle:
    teachers: pd.DataFrame
    groups: pd.DataFrame
    subjects: pd.DataFrame
    rooms: pd.DataFrame
    preferences: pd.DataFrame


def _read(path: Path) -> pd.DataFrame:
    # всё читаем строками, числа приводим явно
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")


def _ensure_ids(df: pd.DataFrame, prefix: str) -> pd.DataFrame:
    # Без колонки id назначаем последовательные id по порядку строк
    if "id" not in df.columns:
        df = df.copy()
        df["id"] = [f"{prefix}{i + 1}" for i in range(len(df))]
    return df


def load_data(data_dir: str) -> DataBundle:
    base = Path(data_dir)
    frames = {}
    for name, prefix in (("teachers", "t"), ("groups", "g"), ("subjects", "s"), ("rooms", "r")):
        path = base / f"{name}.csv"
        if not path.exists():
            raise FileNotFoundError(f"Не найден файл {path}")
        frames[name] = _ensure_ids(_read(path), prefix)

    pref_path = base / "preferences.csv"
    preferences = _read(pref_path) if pref_path.exists() else pd.DataFrame(columns=PREFERENCE_COLUMNS)

    return DataBundle(preferences=preferences, **frames)


def _opt(val: Any) -> Optional[str]:
    if val is None or (isinstance(val, float) and pd.isna(val)):
        return None
    text = str(val).strip()
    return text or None


def _parse_number(val: Any) -> Optional[float]:
    text = _opt(val)
    if text is None:
        return None
    parsed = pd.to_numeric(text.replace(",", "."), errors="coerce")
    return None if pd.isna(parsed) else float(parsed)


def _num(val: Any, default: float = 0.0) -> float:
    parsed = _parse_number(val)
    return default if parsed is None else parsed


def _int_or_none(val: Any) -> Optional[int]:
    parsed = _parse_number(val)
    return None if parsed is None else int(parsed)


def _flag(val: Any) -> bool:
    return (_opt(val) or "").lower() in ("1", "true", "yes", "да", "онлайн")


def to_input(bundle: DataBundle, semester_weeks: int) -> GenerationInput:
    teachers: List[Teacher] = [
        Teacher(
            id=str(r["id"]),
            full_name=str(r["full_name"]),
            short_name=_opt(r.get("short_name")),
            email=_opt(r.get("email")),
            phone=_opt(r.get("phone")),
            is_online=_flag(r.get("is_online")),
            notes=_opt(r.get("notes")),
        )
        for _, r in bundle.teachers.iterrows()
    ]
    groups = [
        Group(id=str(r["id"]), name=str(r["name"]), faculty=_opt(r.get("faculty")), size=_int_or_none(r.get("size")))
        for _, r in bundle.groups.iterrows()
    ]
    subjects = [
        Subject(
            id=str(r["id"]),
            direction=str(r.get("direction", "")),
            name=str(r["name"]),
            total_hours=_num(r.get("total_hours")),
            hours_per_unit=_num(r.get("hours_per_unit")),
            groups=str(r.get("groups", "")),
            teacher_name=str(r.get("teacher_name", "")),
            week21=_opt(r.get("week21")),
            course=_opt(r.get("course")),
        )
        for _, r in bundle.subjects.iterrows()
    ]
    rooms = [
        Room(
            id=str(r["id"]),
            number=str(r.get("number", "")),
            type=_opt(r.get("type")) or "other",
            capacity=_int_or_none(r.get("capacity")),
            additional_type=_opt(r.get("additional_type")),
        )
        for _, r in bundle.rooms.iterrows()
    ]
    preferences = [
        TeacherPreference(
            teacher_full_name=str(r["teacher_full_name"]),
            schedule_preference=str(r.get("schedule_preference", "")),
            id=_opt(r.get("id")),
        )
        for _, r in bundle.preferences.iterrows()
    ]
    return GenerationInput(
        teachers=teachers,
        groups=groups,
        subjects=subjects,
        rooms=rooms,
        preferences=preferences,
        semester_weeks=int(semester_weeks),
    )
