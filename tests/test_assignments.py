from datetime import timedelta, timezone

import pytest

from tinylearn.models.database_models import SubmissionStatus, UserRole
from tinylearn.services.errors import ErrorCode, ServiceError


def create(service, teacher, students, clock, **overrides):
    fields = dict(
        title="Fractions worksheet",
        description="Complete the worksheet",
        assigned_to=[s.id for s in students],
        due_date=clock() + timedelta(days=3),
    )
    fields.update(overrides)
    return service.create(teacher, **fields)


class TestCreate:
    def test_creates_assignment_with_assignees(self, assignment_service, teacher, make_user, clock):
        s1, s2 = make_user(UserRole.STUDENT), make_user(UserRole.STUDENT)
        assignment = create(assignment_service, teacher, [s2, s1, s2], clock)

        assert assignment.id is not None
        assert assignment.teacher_id == teacher.id
        assert assignment.assigned_to == sorted([s1.id, s2.id])
        assert assignment.max_points == 100
        assert assignment.is_active is True

    def test_due_date_equal_to_now_is_rejected(self, assignment_service, teacher, student, clock):
        with pytest.raises(ServiceError) as exc:
            create(assignment_service, teacher, [student], clock, due_date=clock())
        assert exc.value.code == ErrorCode.INVALID_DUE_DATE

    def test_due_date_just_after_now_is_accepted(self, assignment_service, teacher, student, clock):
        assignment = create(assignment_service, teacher, [student], clock,
                            due_date=clock() + timedelta(milliseconds=1))
        assert assignment.due_date > clock()

    def test_aware_due_date_is_normalized_to_utc(self, assignment_service, teacher, student, clock):
        due = (clock() + timedelta(days=1)).replace(tzinfo=timezone.utc)
        assignment = create(assignment_service, teacher, [student], clock, due_date=due)
        assert assignment.due_date.tzinfo is None
        assert assignment.due_date == clock() + timedelta(days=1)

    def test_only_teachers_create(self, assignment_service, student, admin, clock):
        for caller in (student, admin):
            with pytest.raises(ServiceError) as exc:
                create(assignment_service, caller, [student], clock)
            assert exc.value.code == ErrorCode.FORBIDDEN

    @pytest.mark.parametrize("points", [0, 1001])
    def test_max_points_range(self, assignment_service, teacher, student, clock, points):
        with pytest.raises(ServiceError) as exc:
            create(assignment_service, teacher, [student], clock, max_points=points)
        assert exc.value.code == ErrorCode.VALIDATION

    def test_assignees_must_be_students(self, assignment_service, teacher, parent, clock):
        with pytest.raises(ServiceError) as exc:
            create(assignment_service, teacher, [parent], clock)
        assert exc.value.code == ErrorCode.VALIDATION
        assert exc.value.details == {"invalid_ids": [parent.id]}

    def test_empty_assignee_list_rejected(self, assignment_service, teacher, clock):
        with pytest.raises(ServiceError) as exc:
            create(assignment_service, teacher, [], clock)
        assert exc.value.code == ErrorCode.VALIDATION

    def test_unknown_lesson_rejected(self, assignment_service, teacher, student, clock):
        with pytest.raises(ServiceError) as exc:
            create(assignment_service, teacher, [student], clock, lesson_id=999)
        assert exc.value.code == ErrorCode.NOT_FOUND


class TestUpdateAndDelete:
    def test_owner_updates_fields_and_assignees(self, assignment_service, teacher, make_user, clock):
        s1, s2 = make_user(UserRole.STUDENT), make_user(UserRole.STUDENT)
        assignment = create(assignment_service, teacher, [s1], clock)

        updated = assignment_service.update(teacher, assignment.id, {
            "title": "Renamed",
            "assigned_to": [s2.id],
            "max_points": 50,
        })
        assert updated.title == "Renamed"
        assert updated.max_points == 50
        assert updated.assigned_to == [s2.id]

    def test_other_teacher_cannot_see_or_edit(self, assignment_service, teacher, make_user, student, clock):
        other = make_user(UserRole.TEACHER)
        assignment = create(assignment_service, teacher, [student], clock)

        with pytest.raises(ServiceError) as exc:
            assignment_service.update(other, assignment.id, {"title": "Hijacked"})
        assert exc.value.code == ErrorCode.NOT_FOUND_OR_FORBIDDEN

        with pytest.raises(ServiceError) as missing:
            assignment_service.update(other, 4242, {"title": "Hijacked"})
        assert missing.value.code == exc.value.code

    def test_update_revalidates_due_date(self, assignment_service, teacher, student, clock):
        assignment = create(assignment_service, teacher, [student], clock)
        with pytest.raises(ServiceError) as exc:
            assignment_service.update(teacher, assignment.id, {"due_date": clock() - timedelta(hours=1)})
        assert exc.value.code == ErrorCode.INVALID_DUE_DATE

    def test_max_points_cannot_drop_below_recorded_score(self, assignment_service, submission_service,
                                                         teacher, student, clock):
        assignment = create(assignment_service, teacher, [student], clock, max_points=50)
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        submission_service.submit(student, draft.id)
        submission_service.grade(teacher, draft.id, 40)

        with pytest.raises(ServiceError) as exc:
            assignment_service.update(teacher, assignment.id, {"max_points": 10})
        assert exc.value.code == ErrorCode.VALIDATION
        assert assignment_service.get(teacher, assignment.id).max_points == 50

        assert assignment_service.update(teacher, assignment.id, {"max_points": 40}).max_points == 40

    def test_delete_is_soft(self, assignment_service, teacher, student, clock):
        assignment = create(assignment_service, teacher, [student], clock)
        assignment_service.delete(teacher, assignment.id)

        assert assignment_service.get(teacher, assignment.id).is_active is False
        assert assignment_service.list_for_student(student).items == []
        inactive = assignment_service.list_for_teacher(teacher, status="inactive")
        assert [v.assignment.id for v in inactive.items] == [assignment.id]


class TestListings:
    def test_teacher_listing_includes_submission_stats(self, assignment_service, submission_service,
                                                       teacher, make_user, clock):
        s1, s2, s3 = (make_user(UserRole.STUDENT) for _ in range(3))
        assignment = create(assignment_service, teacher, [s1, s2, s3], clock)

        draft = submission_service.create_or_update(s1, assignment.id, "draft only")
        sub2 = submission_service.create_or_update(s2, assignment.id, "answer")
        submission_service.submit(s2, sub2.id)
        sub3 = submission_service.create_or_update(s3, assignment.id, "answer")
        submission_service.submit(s3, sub3.id)
        submission_service.grade(teacher, sub3.id, 90)

        page = assignment_service.list_for_teacher(teacher)
        stats = page.items[0].stats
        assert draft.status == SubmissionStatus.DRAFT
        assert (stats.total, stats.submitted, stats.graded, stats.pending) == (3, 2, 1, 1)

    def test_student_listing_is_ordered_and_annotated(self, assignment_service, teacher, student, clock):
        later = create(assignment_service, teacher, [student], clock, title="Later",
                       due_date=clock() + timedelta(days=5))
        sooner = create(assignment_service, teacher, [student], clock, title="Sooner",
                        due_date=clock() + timedelta(hours=12))

        page = assignment_service.list_for_student(student)
        assert [v.assignment.id for v in page.items] == [sooner.id, later.id]
        assert page.items[0].days_until_due == 1
        assert page.items[1].days_until_due == 5
        assert page.items[0].submission is None
        assert page.items[0].is_overdue is False

    def test_overdue_flag_and_filter(self, assignment_service, teacher, student, clock):
        assignment = create(assignment_service, teacher, [student], clock,
                            due_date=clock() + timedelta(hours=1))
        clock.advance(hours=2)

        page = assignment_service.list_for_student(student, status="overdue")
        assert [v.assignment.id for v in page.items] == [assignment.id]
        assert page.items[0].is_overdue is True
        assert page.items[0].days_until_due == 0

    def test_unknown_status_filter_rejected(self, assignment_service, student):
        with pytest.raises(ServiceError) as exc:
            assignment_service.list_for_student(student, status="bogus")
        assert exc.value.code == ErrorCode.VALIDATION

    def test_pagination_metadata(self, assignment_service, teacher, student, clock):
        for i in range(5):
            create(assignment_service, teacher, [student], clock, title=f"Task {i}")

        page = assignment_service.list_for_teacher(teacher, page=2, limit=2)
        assert len(page.items) == 2
        assert page.pagination() == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_parent_cannot_list(self, assignment_service, parent):
        with pytest.raises(ServiceError) as exc:
            assignment_service.list_for(parent)
        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_get_checks_visibility(self, assignment_service, teacher, make_user, student, clock):
        outsider = make_user(UserRole.STUDENT)
        assignment = create(assignment_service, teacher, [student], clock)

        assert assignment_service.get(student, assignment.id).id == assignment.id
        with pytest.raises(ServiceError) as exc:
            assignment_service.get(outsider, assignment.id)
        assert exc.value.code == ErrorCode.FORBIDDEN
