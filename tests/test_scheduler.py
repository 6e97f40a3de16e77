import unittest
from collections import Counter

from timetable.config import GeneratorConfig
from timetable.context import SchedulerContext
from timetable.model import (
    Assignment,
    GenerationInput,
    Group,
    Lesson,
    Room,
    Subject,
    Teacher,
    TeacherPreference,
)
from timetable.scheduler import (
    place_assignment,
    place_representative_week,
    replicate_week,
    sort_pending,
    underplaced_events,
)
from timetable.scoring import (
    day_balance_term,
    group_balance_term,
    rank_candidates,
    score_slot,
    teacher_balance_term,
)

ROOM = Room("r1", "301", "комп", 24)


def _assignment(group, teacher, sid="s1", pairs=2, pref_text=None):
    subject = Subject(sid, "ИСИП", f"Предмет {sid}", 84, 4, group.name, teacher.full_name)
    pref = TeacherPreference(teacher.full_name, pref_text) if pref_text is not None else None
    return Assignment(group, subject, teacher, pref, pairs)


def _data(groups, teachers):
    return GenerationInput(teachers=teachers, groups=groups, subjects=[], rooms=[ROOM], semester_weeks=3)


def _lesson(weekday, pair, group_id, teacher_id, week=1, subject_id="s1"):
    return Lesson(f"l-{week}-{weekday}-{pair}-{group_id}", week, weekday, pair, group_id, subject_id, teacher_id, ROOM.id)


class BalanceTermTests(unittest.TestCase):
    def setUp(self):
        self.cfg = GeneratorConfig()
        self.g1, self.g2 = Group("g1", "G1"), Group("g2", "G2")
        self.t1, self.t2 = Teacher("t1", "Иванов И.И."), Teacher("t2", "Петров П.П.")
        self.a1 = _assignment(self.g1, self.t1)
        self.a2 = _assignment(self.g2, self.t2)
        self.ctx = SchedulerContext.create([self.a1, self.a2], [self.g1, self.g2], 2, [ROOM], self.cfg)

    def test_empty_week_is_neutral(self):
        self.assertEqual(group_balance_term(self.ctx, "g1"), 0)
        self.assertEqual(teacher_balance_term(self.ctx, "t1"), 0)
        self.assertEqual(day_balance_term(self.ctx, 1), 0)
        self.assertEqual(score_slot(self.ctx, self.a1, 1, 1), 50)

    def test_terms_after_one_lesson(self):
        self.ctx.occupy(_lesson(1, 1, "g1", "t1"), self.a1)
        # g1: 0.5 против среднего 0.25, g2: 0 против 0.25
        self.assertEqual(group_balance_term(self.ctx, "g1"), -40)
        self.assertEqual(group_balance_term(self.ctx, "g2"), 50)
        # среднее 0.5 занятия на преподавателя
        self.assertEqual(teacher_balance_term(self.ctx, "t1"), -15)
        self.assertEqual(teacher_balance_term(self.ctx, "t2"), 25)
        # среднее 0.2 занятия на день
        self.assertEqual(day_balance_term(self.ctx, 1), -10)
        self.assertEqual(day_balance_term(self.ctx, 2), 15)
        self.assertEqual(score_slot(self.ctx, self.a2, 2, 1), 50 + 50 + 25 + 15)

    def test_occupied_slots_are_not_candidates(self):
        self.ctx.occupy(_lesson(1, 1, "g1", "t1"), self.a1)
        slots = {(c.weekday, c.pair) for c in rank_candidates(self.ctx, self.a1)}
        self.assertEqual(len(slots), 19)
        self.assertNotIn((1, 1), slots)
        # у другой группы и другого преподавателя слот свободен
        self.assertEqual(len(rank_candidates(self.ctx, self.a2)), 20)


class PlacementTests(unittest.TestCase):
    def setUp(self):
        self.cfg = GeneratorConfig()

    def test_preferences_go_first_then_least_complete_groups(self):
        g1, g2, g3 = Group("g1", "G1"), Group("g2", "G2"), Group("g3", "G3")
        t1, t2, t3 = Teacher("t1", "A"), Teacher("t2", "B"), Teacher("t3", "C")
        a1 = _assignment(g1, t1)
        a2 = _assignment(g2, t2)
        a3 = _assignment(g3, t3, pref_text="только пт")
        ctx = SchedulerContext.create([a1, a2, a3], [g1, g2, g3], 3, [ROOM], self.cfg)
        ctx.occupy(_lesson(1, 1, "g1", "t1"), a1)

        order = sort_pending(ctx, [a1, a2, a3])
        self.assertEqual([a.group.id for a in order], ["g3", "g2", "g1"])

    def test_group_declaration_order_breaks_ties(self):
        g1, g2 = Group("g1", "G1"), Group("g2", "G2")
        t = Teacher("t1", "A")
        a1, a2 = _assignment(g1, t), _assignment(g2, t)
        ctx = SchedulerContext.create([a2, a1], [g1, g2], 1, [ROOM], self.cfg)
        self.assertEqual([a.group.id for a in sort_pending(ctx, [a2, a1])], ["g1", "g2"])

    def test_fully_placed_assignments_are_not_pending(self):
        g1 = Group("g1", "G1")
        a1 = _assignment(g1, Teacher("t1", "A"), pairs=1)
        ctx = SchedulerContext.create([a1], [g1], 1, [ROOM], self.cfg)
        self.assertEqual(place_assignment(ctx, a1), 1)
        self.assertEqual(sort_pending(ctx, [a1]), [])
        self.assertEqual(place_assignment(ctx, a1), 0)

    def test_hard_violations_are_never_used(self):
        g1 = Group("g1", "G1")
        teacher = Teacher("t1", "Иванов И.И.")
        a1 = _assignment(g1, teacher, pairs=20, pref_text="не занимать пн")
        ctx = place_representative_week([a1], _data([g1], [teacher]), self.cfg)

        self.assertEqual(len(ctx.week_lessons), 16)
        self.assertTrue(all(l.weekday != 1 for l in ctx.week_lessons))
        self.assertEqual(ctx.remaining(a1), 4)
        self.assertEqual(ctx.passes_run, self.cfg.max_iterations)

        events = underplaced_events(ctx, [a1])
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].kind, "underplaced")
        self.assertEqual(events[0].missing_pairs, 4)

    def test_shared_teacher_never_double_booked(self):
        teacher = Teacher("t1", "Иванов И.И.")
        groups = [Group(f"g{i}", f"G{i}") for i in range(1, 4)]
        assignments = [_assignment(g, teacher, pairs=8) for g in groups]
        ctx = place_representative_week(assignments, _data(groups, [teacher]), self.cfg)

        # у преподавателя всего 20 слотов в неделю
        self.assertEqual(len(ctx.week_lessons), 20)
        slots = Counter((l.weekday, l.pair_index) for l in ctx.week_lessons)
        self.assertEqual(max(slots.values()), 1)
        for a in assignments:
            self.assertLessEqual(ctx.placed_for(a), a.required_pairs_per_week)

    def test_stops_early_when_everything_fits(self):
        g1 = Group("g1", "G1")
        a1 = _assignment(g1, Teacher("t1", "A"), pairs=3)
        ctx = place_representative_week([a1], _data([g1], [a1.teacher]), self.cfg)
        self.assertEqual(ctx.passes_run, 1)
        self.assertEqual(len(ctx.week_lessons), 3)
        self.assertTrue(all(l.room_id == ROOM.id and l.week_index == 1 for l in ctx.week_lessons))

    def test_time_limit_stops_placement(self):
        cfg = GeneratorConfig(time_limit_sec=-1)
        g1 = Group("g1", "G1")
        a1 = _assignment(g1, Teacher("t1", "A"))
        ctx = place_representative_week([a1], _data([g1], [a1.teacher]), cfg)
        self.assertEqual(ctx.week_lessons, [])
        self.assertEqual(ctx.remaining(a1), 2)


class ReplicationTests(unittest.TestCase):
    def test_weeks_are_identical_copies(self):
        week = [_lesson(1, 1, "g1", "t1"), _lesson(2, 3, "g1", "t1", subject_id="s2")]
        schedule = replicate_week(week, 4, "семестр")

        self.assertEqual(schedule.semester_label, "семестр")
        self.assertEqual([w.week_index for w in schedule.weeks], [1, 2, 3, 4])
        ids = [l.id for l in schedule.all_lessons()]
        self.assertEqual(len(ids), len(set(ids)))
        reference = Counter(l.slot_signature() for l in week)
        for w in schedule.weeks:
            self.assertEqual(Counter(l.slot_signature() for l in w.lessons), reference)
            self.assertTrue(all(l.week_index == w.week_index for l in w.lessons))

    def test_empty_week(self):
        schedule = replicate_week([], 2, "x")
        self.assertEqual(len(schedule.weeks), 2)
        self.assertEqual(schedule.all_lessons(), [])


if __name__ == "__main__":
    unittest.main()
