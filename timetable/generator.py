# timetable/generator.py
import logging
import time
from typing import Optional

from .assignments import derive_assignments
from .config import GeneratorConfig
from .matching import PreferenceIndex, TeacherIndex
from .model import GenerationInput, GenerationResult
from .scheduler import place_representative_week, replicate_week, underplaced_events
from .simple import generate_week_by_week
from .statistics import compute_statistics
from .validation import validate_input

logger = logging.getLogger(__name__)


def generate_schedule(data: GenerationInput, cfg: Optional[GeneratorConfig] = None) -> GenerationResult:
    """
    Составляет расписание на семестр.

    Падает с ValidationError только если не заданы сами коллекции данных.
    Проблемы качества данных (нет часов, не найден преподаватель, не
    хватило слотов) не прерывают генерацию: они попадают в warnings,
    а недостача видна в статистике.
    """
    cfg = cfg or GeneratorConfig()
    validate_input(data)

    start = time.perf_counter()
    teacher_index = TeacherIndex(data.teachers)
    preference_index = PreferenceIndex(data.preferences)
    logger.info(
        f"Преподавателей в индексе: {len(teacher_index)} | С пожеланиями: {len(preference_index)} | "
        f"Стратегия: {cfg.strategy}"
    )

    if cfg.strategy == "simple":
        schedule, warnings = generate_week_by_week(data, cfg, teacher_index, preference_index)
    else:
        assignments, warnings = derive_assignments(data, cfg, teacher_index, preference_index)
        ctx = place_representative_week(assignments, data, cfg)
        warnings.extend(underplaced_events(ctx, assignments))
        schedule = replicate_week(ctx.week_lessons, data.semester_weeks, cfg.semester_label)
        logger.info(f"Проходов размещения: {ctx.passes_run}, занятий в типичной неделе: {len(ctx.week_lessons)}")

    stats = compute_statistics(schedule, data, cfg, preference_index)
    stats.underplaced_pairs = sum(w.missing_pairs for w in warnings if w.kind == "underplaced")
    elapsed = time.perf_counter() - start

    logger.info("=== Статистика генерации расписания ===")
    logger.info(f"Всего занятий: {stats.total_lessons} | Недель: {data.semester_weeks} | Время: {elapsed:.2f}s")
    logger.info(f"Занятий в неделе: {stats.lessons_per_week} | Не размещено пар в неделю: {stats.underplaced_pairs}")
    logger.info(f"Удовлетворенность требований: {stats.satisfaction_rate}% | Конфликтов: {stats.conflicts}")

    return GenerationResult(schedule=schedule, stats=stats, warnings=warnings)
