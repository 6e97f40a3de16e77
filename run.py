import argparse
import logging
import os
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, List

import pandas as pd

from timetable.config import GeneratorConfig, day_name, load_config
from timetable.data_loader import load_data, to_input
from timetable.generator import generate_schedule
from timetable.model import GenerationInput, GenerationResult, SemesterSchedule

DEBUG_GENERATOR = os.environ.get("DEBUG_GENERATOR", "").lower() in ("1", "true", "yes")


def _names(data: GenerationInput) -> Dict[str, Dict[str, str]]:
    return {
        "group": {g.id: g.name for g in data.groups},
        "subject": {s.id: s.name for s in data.subjects},
        "teacher": {t.id: t.full_name for t in data.teachers},
        "room": {r.id: r.number for r in data.rooms},
    }


def schedule_to_dataframe(schedule: SemesterSchedule, data: GenerationInput) -> pd.DataFrame:
    names = _names(data)
    rows = []
    for week in schedule.weeks:
        for lesson in week.lessons:
            rows.append(
                {
                    "Неделя": week.week_index,
                    "День": (day_name(lesson.weekday) or str(lesson.weekday)).upper(),
                    "weekday": lesson.weekday,
                    "Пара": lesson.pair_index,
                    "Группа": names["group"].get(lesson.group_id, lesson.group_id),
                    "Предмет": names["subject"].get(lesson.subject_id, lesson.subject_id),
                    "Преподаватель": names["teacher"].get(lesson.teacher_id, lesson.teacher_id),
                    "Аудитория": names["room"].get(lesson.room_id, lesson.room_id),
                }
            )
    return pd.DataFrame(
        rows,
        columns=["Неделя", "День", "weekday", "Пара", "Группа", "Предмет", "Преподаватель", "Аудитория"],
    )


def group_week_matrix(df_schedule: pd.DataFrame, group_name: str, cfg: GeneratorConfig, week: int = 1) -> pd.DataFrame:
    """Сетка пары x дни для одной группы и одной недели."""
    cols = [day_name(d).upper() for d in cfg.weekdays]
    matrix = pd.DataFrame("", index=range(1, cfg.pairs_per_day + 1), columns=cols)
    matrix.index.name = "Пара"
    sel = df_schedule[(df_schedule["Группа"] == group_name) & (df_schedule["Неделя"] == week)]
    for r in sel.itertuples(index=False):
        cell = f"{r[5]} ({r[6]}, ауд. {r[7]})"
        matrix.loc[r[3], r[1]] = cell
    return matrix


def stats_to_frames(result: GenerationResult) -> Dict[str, pd.DataFrame]:
    st = result.stats
    summary = pd.DataFrame(
        [
            {"показатель": "total_lessons", "значение": st.total_lessons},
            {"показатель": "lessons_per_week", "значение": st.lessons_per_week},
            {"показатель": "underplaced_pairs", "значение": st.underplaced_pairs},
            {"показатель": "conflicts", "значение": st.conflicts},
            {"показатель": "satisfied_preferences", "значение": st.satisfied_preferences},
            {"показатель": "total_preferences", "значение": st.total_preferences},
            {"показатель": "satisfaction_rate", "значение": st.satisfaction_rate},
            {"показатель": "teacher_load_balance", "значение": st.teacher_load_balance},
        ]
    )
    teachers = pd.DataFrame(
        [vars(t) for t in st.teacher_satisfaction],
        columns=["teacher_name", "satisfied", "total", "rate"],
    )
    groups = pd.DataFrame([vars(g) for g in st.group_loads], columns=["group_name", "lessons", "hours"])
    warnings = pd.DataFrame(
        [vars(w) for w in result.warnings],
        columns=["kind", "message", "group_name", "subject_name", "teacher_name", "missing_pairs"],
    )
    return {"stats": summary, "teacher_satisfaction": teachers, "group_loads": groups, "warnings": warnings}


def export_outputs(df_schedule: pd.DataFrame, result: GenerationResult, out_dir: Path) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written = [out_dir / "schedule.csv"]
    df_schedule.drop(columns=["weekday"]).to_csv(written[0], index=False)
    for name, frame in stats_to_frames(result).items():
        path = out_dir / f"{name}.csv"
        frame.to_csv(path, index=False)
        written.append(path)
    return written


def main(argv=None):
    parser = argparse.ArgumentParser(description="Генерация расписания на семестр")
    parser.add_argument("--config", default="config.yaml", help="Путь к файлу конфигурации")
    parser.add_argument("--data_dir", default="data", help="Каталог с CSV входных данных")
    parser.add_argument("--out_dir", default="outputs", help="Каталог для результатов")
    parser.add_argument("--weeks", type=int, default=None, help="Число недель семестра")
    parser.add_argument("--strategy", choices=["smart", "simple"], default=None)
    parser.add_argument("--debug", action="store_true", help="Подробный лог")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or DEBUG_GENERATOR) else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    cfg = load_config(args.config)
    if args.strategy:
        cfg = replace(cfg, strategy=args.strategy)
    weeks = args.weeks if args.weeks is not None else cfg.semester_weeks

    print("Загрузка данных...")
    data = to_input(load_data(args.data_dir), weeks)
    print(
        f"Преподавателей: {len(data.teachers)} | Групп: {len(data.groups)} | "
        f"Предметов: {len(data.subjects)} | Аудиторий: {len(data.rooms)} | Недель: {weeks}"
    )

    start = time.perf_counter()
    result = generate_schedule(data, cfg)
    elapsed = time.perf_counter() - start

    st = result.stats
    print("\n--- РЕЗУЛЬТАТ ---")
    print(f"Занятий: {st.total_lessons} ({st.lessons_per_week} в неделю) | Время: {elapsed:.2f}s")
    print(f"Конфликтов: {st.conflicts} | Удовлетворенность: {st.satisfaction_rate}% | Баланс нагрузки: {st.teacher_load_balance}")
    if result.warnings:
        print(f"Предупреждений: {len(result.warnings)} (см. warnings.csv)")

    df_schedule = schedule_to_dataframe(result.schedule, data)
    out_dir = Path(args.out_dir)
    export_outputs(df_schedule, result, out_dir)
    print(f"Результаты сохранены в {out_dir}/schedule.csv и {out_dir}/stats.csv")


if __name__ == "__main__":
    main()
