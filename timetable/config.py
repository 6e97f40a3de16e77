"""
Конфигурация генератора расписания.

Все параметры генерации собраны в одном dataclass, который можно
загрузить из YAML, чтобы прогоны были воспроизводимыми.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Optional, Any

import yaml


# 1=ПН .. 5=ПТ, так дни пишутся в текстовых пожеланиях преподавателей
DAY_NAMES: Dict[int, str] = {
    1: "пн",
    2: "вт",
    3: "ср",
    4: "чт",
    5: "пт",
}

STRATEGIES = ("smart", "simple")


@dataclass
class GeneratorConfig:
    # Сетка недели
    semester_weeks: int = 21
    weekdays: List[int] = field(default_factory=lambda: list(DAY_NAMES.keys()))
    pairs_per_day: int = 4
    hours_per_pair: int = 2

    # Жадный алгоритм
    strategy: str = "smart"
    max_iterations: int = 10
    base_score: int = 50
    hard_violation_threshold: int = -100
    time_limit_sec: Optional[float] = None
    semester_label: str = "2 семестр 2025-26"

    # Веса пожеланий
    weight_only_day: int = 200
    weight_excluded_day: int = -500
    weight_mentioned_day: int = 80
    weight_pair_range_hit: int = 100
    weight_pair_range_miss: int = -200
    weight_single_pair_hit: int = 150
    weight_single_pair_miss: int = -300

    # Балансировка нагрузки: (порог, бонус)
    group_strong_gap: float = 0.1
    group_gap: float = 0.05
    weight_group_far_behind: int = 50
    weight_group_behind: int = 30
    weight_group_far_ahead: int = -40
    weight_group_ahead: int = -20
    teacher_low_ratio: float = 0.8
    teacher_high_ratio: float = 1.2
    weight_teacher_underloaded: int = 25
    weight_teacher_overloaded: int = -15
    day_low_ratio: float = 0.8
    day_high_ratio: float = 1.2
    weight_day_underloaded: int = 15
    weight_day_overloaded: int = -10

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Неизвестная стратегия '{self.strategy}', допустимо: {', '.join(STRATEGIES)}"
            )


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: str = "config.yaml") -> GeneratorConfig:
    cfg_path = Path(path)
    data = _load_yaml(cfg_path)
    if not isinstance(data, dict):
        raise ValueError(f"{path} должен содержать отображение ключ: значение")
    return GeneratorConfig.from_dict(data)


def day_name(weekday: int) -> str:
    """Токен дня для кода дня недели (1 -> 'пн')."""
    return DAY_NAMES.get(weekday, "")
