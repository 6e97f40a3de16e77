"""
Разбор текстовых пожеланий преподавателей.

Текст разбирается один раз в набор правил (OnlyDay, ExcludeDay,
MentionDay, OnlyPairRange, OnlyPair). Оценка слота при размещении,
проверка удовлетворённости для статистики и классификация в простом
генераторе работают с одним и тем же набором правил, но трактуют его
по-своему: их результаты не обязаны совпадать.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .config import DAY_NAMES, GeneratorConfig
from .model import TeacherPreference

NEGATIONS = ("не занимать", "кроме")

PAIR_RANGE_PHRASES = {
    "только 1-2 пары": (1, 2),
    "только 3-4 пары": (3, 4),
}
SINGLE_PAIR_PHRASES = {
    "только 1 пара": 1,
    "только 4 пары": 4,
}


@dataclass(frozen=True)
class OnlyDay:
    day: int
    spaced: bool = True     # "только пн" (False: "толькопн")


@dataclass(frozen=True)
class ExcludeDay:
    day: int
    via: str                # "не занимать" | "кроме"


@dataclass(frozen=True)
class MentionDay:
    day: int


@dataclass(frozen=True)
class OnlyPairRange:
    lo: int
    hi: int

    def contains(self, pair: int) -> bool:
        return self.lo <= pair <= self.hi


@dataclass(frozen=True)
class OnlyPair:
    pair: int


Rule = Union[OnlyDay, ExcludeDay, MentionDay, OnlyPairRange, OnlyPair]


@dataclass(frozen=True)
class PreferenceRules:
    text: str
    rules: Tuple[Rule, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def has_negation(self) -> bool:
        return any(n in self.text for n in NEGATIONS)

    @property
    def has_only(self) -> bool:
        return "только" in self.text

    def of_type(self, kind) -> Tuple[Rule, ...]:
        return tuple(r for r in self.rules if isinstance(r, kind))

    def only_days(self, spaced_only: bool = True) -> Tuple[int, ...]:
        return tuple(
            r.day for r in self.of_type(OnlyDay) if r.spaced or not spaced_only
        )

    def excludes(self, day: int, via: Optional[str] = None) -> bool:
        return any(
            r.day == day and (via is None or r.via == via)
            for r in self.of_type(ExcludeDay)
        )

    def mentioned_days(self) -> Tuple[int, ...]:
        return tuple(r.day for r in self.of_type(MentionDay))


NO_RULES = PreferenceRules(text="")


def parse_preference(text: Optional[str]) -> PreferenceRules:
    lowered = (text or "").lower()
    if not lowered:
        return NO_RULES

    rules = []
    for day, token in DAY_NAMES.items():
        if f"только {token}" in lowered:
            rules.append(OnlyDay(day))
        elif f"только{token}" in lowered:
            rules.append(OnlyDay(day, spaced=False))
        for neg in NEGATIONS:
            if f"{neg} {token}" in lowered:
                rules.append(ExcludeDay(day, via=neg))
        if token in lowered:
            rules.append(MentionDay(day))

    for phrase, (lo, hi) in PAIR_RANGE_PHRASES.items():
        if phrase in lowered:
            rules.append(OnlyPairRange(lo, hi))
    for phrase, pair in SINGLE_PAIR_PHRASES.items():
        if phrase in lowered:
            rules.append(OnlyPair(pair))

    return PreferenceRules(text=lowered, rules=tuple(rules))


def rules_for(preference: Optional[TeacherPreference]) -> PreferenceRules:
    if preference is None:
        return NO_RULES
    return parse_preference(preference.schedule_preference)


def preference_score(rules: PreferenceRules, weekday: int, pair: int, cfg: GeneratorConfig) -> int:
    """Вклад пожелания в оценку слота (без базовой оценки и балансировки)."""
    if rules.is_empty:
        return 0

    score = 0
    if weekday in rules.only_days():
        score += cfg.weight_only_day
    if rules.excludes(weekday):
        score += cfg.weight_excluded_day
    if weekday in rules.mentioned_days() and not rules.has_negation:
        score += cfg.weight_mentioned_day

    for r in rules.of_type(OnlyPairRange):
        score += cfg.weight_pair_range_hit if r.contains(pair) else cfg.weight_pair_range_miss
    for r in rules.of_type(OnlyPair):
        score += cfg.weight_single_pair_hit if pair == r.pair else cfg.weight_single_pair_miss

    return score


def _pair_rules_violated(rules: PreferenceRules, pair: int) -> bool:
    if any(not r.contains(pair) for r in rules.of_type(OnlyPairRange)):
        return True
    return any(pair != r.pair for r in rules.of_type(OnlyPair))


def is_satisfied(rules: PreferenceRules, weekday: int, pair: int) -> bool:
    """
    Проверка уже поставленного занятия для статистики.

    Запрет дня и ограничения по парам проверяются строго. «Только <день>»
    проверяется мягко: занятие в другой день засчитывается, если этот день
    хоть как-то упомянут в тексте.
    """
    if rules.is_empty:
        return True

    if rules.excludes(weekday):
        return False

    if rules.has_only:
        only = rules.only_days(spaced_only=False)
        if only and weekday not in only:
            mentioned = [
                d for d in rules.mentioned_days()
                if not rules.excludes(d, via="не занимать")
            ]
            if mentioned and weekday not in mentioned:
                return False

    return not _pair_rules_violated(rules, pair)


def classify_simple(rules: Optional[PreferenceRules], weekday: int, pair: int) -> Tuple[bool, bool]:
    """(удовлетворяет, нарушает) для простого понедельного генератора."""
    if rules is None:
        return True, False

    satisfies = False
    violates = rules.excludes(weekday)

    if rules.has_only:
        mentioned = rules.mentioned_days()
        if mentioned and weekday not in mentioned:
            violates = True
        elif mentioned:
            satisfies = True

    for r in rules.of_type(OnlyPairRange):
        if r.contains(pair):
            satisfies = True
        else:
            violates = True
    for r in rules.of_type(OnlyPair):
        if pair == r.pair:
            satisfies = True
        else:
            violates = True

    if not violates and not rules.is_empty:
        satisfies = True
    return satisfies, violates
