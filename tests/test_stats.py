# tests/test_stats.py

from app.services import stats_service


class TestPlatformStats:
    def test_empty_platform(self, db):
        stats = stats_service.get_platform_stats(db)
        assert (stats.teachers, stats.students, stats.active_lessons, stats.subjects) == (0, 0, 0, 0)

    def test_counts_by_role_and_activity(self, db, make_profile, make_lesson, teacher, student, admin):
        make_profile("student")
        make_lesson(teacher)
        make_lesson(teacher, is_active=False)

        stats = stats_service.get_platform_stats(db)

        assert stats.teachers == 1
        assert stats.students == 2
        assert stats.active_lessons == 1
        assert stats.subjects == 1
