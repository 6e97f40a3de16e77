import unittest

from timetable.assignments import derive_assignments, pairs_per_week_from_unit, required_pairs_per_week
from timetable.config import GeneratorConfig
from timetable.matching import (
    PreferenceIndex,
    TeacherIndex,
    group_matches_subject,
    normalize_name,
    subjects_for_group,
)
from timetable.model import GenerationInput, Group, Room, Subject, Teacher, TeacherPreference


def _subject(sid, groups, teacher_name, total_hours=84, name=None):
    return Subject(
        id=sid,
        direction="ИСИП",
        name=name or f"Предмет {sid}",
        total_hours=total_hours,
        hours_per_unit=4,
        groups=groups,
        teacher_name=teacher_name,
    )


class GroupMatchingTests(unittest.TestCase):
    def test_exact_and_case_insensitive(self):
        self.assertTrue(group_matches_subject("1ИТ1.9.25", "1ИТ1.9.25"))
        self.assertTrue(group_matches_subject("G1", " g1"))

    def test_separated_list(self):
        raw = "1ИТ1.9.25, 1ИТ2.9.25;2Д1.9.24\n3Д1.9.23\t4Д1"
        for name in ("1ИТ1.9.25", "1ИТ2.9.25", "2Д1.9.24", "3Д1.9.23", "4Д1"):
            self.assertTrue(group_matches_subject(name, raw), name)

    def test_partial_tokens_match_both_ways(self):
        self.assertTrue(group_matches_subject("1ИТ1", "1ИТ1.9.25"))
        self.assertTrue(group_matches_subject("1ИТ1.9.25", "1ИТ1"))

    def test_no_match(self):
        self.assertFalse(group_matches_subject("2Д1.9.24", "1ИТ1.9.25, 1ИТ2.9.25"))

    def test_subjects_for_group_keeps_declaration_order(self):
        subjects = [_subject("s1", "G2", "x"), _subject("s2", "G1, G2", "x"), _subject("s3", "G3", "x")]
        found = subjects_for_group(Group("g2", "G2"), subjects)
        self.assertEqual([s.id for s in found], ["s1", "s2"])


class TeacherIndexTests(unittest.TestCase):
    def setUp(self):
        self.teachers = [
            Teacher("t1", "Иванов Иван Иванович"),
            Teacher("t2", "Петрова Анна Сергеевна"),
            Teacher("t3", "Анна"),
        ]
        self.index = TeacherIndex(self.teachers)

    def test_normalize(self):
        self.assertEqual(normalize_name("  Иванов И.И. "), "иванов и.и.")
        self.assertEqual(normalize_name(None), "")

    def test_exact_match_ignores_case(self):
        self.assertEqual(self.index.resolve("ИВАНОВ иван иванович ").id, "t1")

    def test_surname_match(self):
        self.assertEqual(self.index.resolve("Петрова А.С.").id, "t2")

    def test_substring_fallback(self):
        # фамилия не совпала, но ключ "анна" входит в строку
        index = TeacherIndex([Teacher("t3", "Анна")])
        self.assertEqual(index.resolve("Смирнова Анна").id, "t3")

    def test_ambiguous_surname_takes_first_declared(self):
        index = TeacherIndex([Teacher("a", "Иванов Иван"), Teacher("b", "Иванов Пётр")])
        self.assertEqual(index.resolve("Иванов").id, "a")

    def test_not_found(self):
        self.assertIsNone(self.index.resolve("Смирнов С.С."))

    def test_blank_name_matches_first_declared(self):
        self.assertEqual(self.index.resolve("").id, "t1")
        self.assertEqual(self.index.resolve("   ").id, "t1")
        self.assertEqual(self.index.resolve(None).id, "t1")

    def test_duplicate_names_keep_last_record(self):
        index = TeacherIndex([Teacher("a", "Иванов И.И."), Teacher("b", "иванов и.и.")])
        self.assertEqual(len(index), 1)
        self.assertEqual(index.exact("Иванов И.И.").id, "b")


class PreferenceIndexTests(unittest.TestCase):
    def test_first_record_per_teacher_wins(self):
        index = PreferenceIndex(
            [
                TeacherPreference("Иванов И.И.", "только пн"),
                TeacherPreference("ИВАНОВ И.И.", "только пт"),
            ]
        )
        pref = index.lookup(Teacher("t1", "иванов и.и."))
        self.assertEqual(pref.schedule_preference, "только пн")
        self.assertIsNone(index.lookup(Teacher("t2", "Петров П.П.")))
        self.assertEqual(len(index), 1)


class AssignmentTests(unittest.TestCase):
    def test_required_pairs(self):
        self.assertEqual(required_pairs_per_week(84, 21), 2)
        self.assertEqual(required_pairs_per_week(10, 21), 1)
        self.assertEqual(required_pairs_per_week(126, 21), 3)
        self.assertEqual(required_pairs_per_week(130, 21), 4)

    def test_pairs_from_unit(self):
        self.assertEqual(pairs_per_week_from_unit(4), 2)
        self.assertEqual(pairs_per_week_from_unit(3), 2)
        self.assertEqual(pairs_per_week_from_unit(0), 1)

    def test_derive_skips_and_preferences(self):
        cfg = GeneratorConfig()
        data = GenerationInput(
            teachers=[Teacher("t1", "Иванов И.И.")],
            groups=[Group("g1", "G1"), Group("g2", "G2"), Group("g9", "ZZZ")],
            subjects=[
                _subject("s1", "G1, G2", "Иванов И.И.", total_hours=84),
                _subject("s2", "G1", "Иванов И.И.", total_hours=0),
                _subject("s3", "G2", "Смирнов С.С.", total_hours=42),
            ],
            rooms=[Room("r1", "301", "комп")],
            preferences=[TeacherPreference("иванов и.и.", "только пн")],
            semester_weeks=21,
        )
        assignments, skips = derive_assignments(
            data, cfg, TeacherIndex(data.teachers), PreferenceIndex(data.preferences)
        )

        self.assertEqual([a.key for a in assignments], [("g1", "s1"), ("g2", "s1")])
        self.assertTrue(all(a.required_pairs_per_week == 2 for a in assignments))
        self.assertTrue(all(a.preference is not None for a in assignments))

        kinds = sorted(s.kind for s in skips)
        self.assertEqual(kinds, ["group_without_subjects", "no_hours", "teacher_not_found"])
        not_found = next(s for s in skips if s.kind == "teacher_not_found")
        self.assertEqual(not_found.teacher_name, "Смирнов С.С.")


if __name__ == "__main__":
    unittest.main()
