from datetime import timedelta

import pytest

from tinylearn.models.database_models import Submission, SubmissionStatus, UserRole
from tinylearn.services.errors import ErrorCode, ServiceError


@pytest.fixture
def assignment(assignment_service, teacher, student, clock):
    return assignment_service.create(
        teacher,
        title="Spelling test",
        description="Write ten words",
        assigned_to=[student.id],
        due_date=clock() + timedelta(days=2),
        max_points=50,
    )


def submitted(submission_service, student, assignment, content="my answer"):
    draft = submission_service.create_or_update(student, assignment.id, content)
    return submission_service.submit(student, draft.id)


class TestDrafts:
    def test_first_write_creates_draft(self, submission_service, student, assignment):
        submission = submission_service.create_or_update(student, assignment.id, "first try",
                                                         attachments=["a.png"], time_spent=10)
        assert submission.status == SubmissionStatus.DRAFT
        assert submission.content == "first try"
        assert submission.attachments == ["a.png"]
        assert submission.time_spent == 10
        assert submission.submitted_at is None

    def test_second_write_overwrites_same_row(self, submission_service, student, assignment):
        first = submission_service.create_or_update(student, assignment.id, "first try")
        second = submission_service.create_or_update(student, assignment.id, "second try")
        assert second.id == first.id
        assert second.content == "second try"

    def test_only_assigned_students(self, submission_service, make_user, assignment, teacher):
        outsider = make_user(UserRole.STUDENT)
        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(outsider, assignment.id, "hello")
        assert exc.value.code == ErrorCode.FORBIDDEN

        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(teacher, assignment.id, "hello")
        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_missing_assignment(self, submission_service, student):
        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(student, 999, "hello")
        assert exc.value.code == ErrorCode.NOT_FOUND

    def test_inactive_assignment_rejects_drafts(self, submission_service, assignment_service,
                                                teacher, student, assignment):
        assignment_service.delete(teacher, assignment.id)
        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(student, assignment.id, "late")
        assert exc.value.code == ErrorCode.INVALID_STATE

    def test_concurrent_first_write_becomes_update(self, submission_service, db, student, assignment,
                                                   monkeypatch):
        other_tab = Submission(assignment_id=assignment.id, student_id=student.id, content="other tab",
                               attachments=[], status=SubmissionStatus.DRAFT, time_spent=0)
        db.add(other_tab)
        db.commit()
        existing_id = other_tab.id

        real_get_for = submission_service.submissions.get_for
        lookups = []

        def stale_first_lookup(assignment_id, student_id):
            lookups.append(assignment_id)
            return None if len(lookups) == 1 else real_get_for(assignment_id, student_id)

        monkeypatch.setattr(submission_service.submissions, "get_for", stale_first_lookup)
        submission = submission_service.create_or_update(student, assignment.id, "this tab")

        assert len(lookups) == 2
        assert submission.id == existing_id
        assert submission.content == "this tab"
        assert db.query(Submission).filter(Submission.assignment_id == assignment.id).count() == 1

    def test_submitted_work_cannot_be_edited(self, submission_service, student, assignment):
        submitted(submission_service, student, assignment)
        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(student, assignment.id, "changed my mind")
        assert exc.value.code == ErrorCode.INVALID_STATE


class TestSubmit:
    def test_submit_stamps_time(self, submission_service, student, assignment, clock):
        submission = submitted(submission_service, student, assignment)
        assert submission.status == SubmissionStatus.SUBMITTED
        assert submission.submitted_at == clock()

    def test_submit_exactly_at_due_date_is_allowed(self, submission_service, student, assignment, clock):
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        clock.now = assignment.due_date
        assert submission_service.submit(student, draft.id).status == SubmissionStatus.SUBMITTED

    def test_submit_after_due_date(self, submission_service, student, assignment, clock):
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        clock.now = assignment.due_date + timedelta(seconds=1)
        with pytest.raises(ServiceError) as exc:
            submission_service.submit(student, draft.id)
        assert exc.value.code == ErrorCode.PAST_DUE

    def test_submit_someone_elses_submission(self, submission_service, make_user, student, assignment):
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        other = make_user(UserRole.STUDENT)
        with pytest.raises(ServiceError) as exc:
            submission_service.submit(other, draft.id)
        assert exc.value.code == ErrorCode.NOT_FOUND_OR_FORBIDDEN

    def test_double_submit(self, submission_service, student, assignment):
        submission = submitted(submission_service, student, assignment)
        with pytest.raises(ServiceError) as exc:
            submission_service.submit(student, submission.id)
        assert exc.value.code == ErrorCode.INVALID_STATE


class TestGrade:
    def test_grade_submitted_work(self, submission_service, teacher, student, assignment, clock):
        submission = submitted(submission_service, student, assignment)
        clock.advance(hours=1)
        graded = submission_service.grade(teacher, submission.id, 42.5, "Nice work")

        assert graded.status == SubmissionStatus.GRADED
        assert graded.score == 42.5
        assert graded.feedback == "Nice work"
        assert graded.graded_by == teacher.id
        assert graded.graded_at == clock()

    @pytest.mark.parametrize("score", [-1, 51])
    def test_score_out_of_range(self, submission_service, teacher, student, assignment, score):
        submission = submitted(submission_service, student, assignment)
        with pytest.raises(ServiceError) as exc:
            submission_service.grade(teacher, submission.id, score)
        assert exc.value.code == ErrorCode.SCORE_OUT_OF_RANGE
        assert submission_service.get(teacher, submission.id).status == SubmissionStatus.SUBMITTED

    @pytest.mark.parametrize("score", [0, 50])
    def test_score_bounds_are_inclusive(self, submission_service, teacher, student, assignment, score):
        submission = submitted(submission_service, student, assignment)
        assert submission_service.grade(teacher, submission.id, score).score == score

    def test_draft_cannot_be_graded(self, submission_service, teacher, student, assignment):
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        with pytest.raises(ServiceError) as exc:
            submission_service.grade(teacher, draft.id, 10)
        assert exc.value.code == ErrorCode.INVALID_STATE

    def test_only_owning_teacher_grades(self, submission_service, make_user, student, assignment):
        submission = submitted(submission_service, student, assignment)
        other = make_user(UserRole.TEACHER)
        with pytest.raises(ServiceError) as exc:
            submission_service.grade(other, submission.id, 10)
        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_graded_submission_is_immutable(self, submission_service, teacher, student, assignment):
        submission = submitted(submission_service, student, assignment)
        submission_service.grade(teacher, submission.id, 40, "Good")

        attempts = [
            lambda: submission_service.create_or_update(student, assignment.id, "sneaky edit"),
            lambda: submission_service.submit(student, submission.id),
            lambda: submission_service.grade(teacher, submission.id, 50),
        ]
        for attempt in attempts:
            with pytest.raises(ServiceError) as exc:
                attempt()
            assert exc.value.code == ErrorCode.ALREADY_GRADED

        final = submission_service.get(student, submission.id)
        assert (final.status, final.score, final.content) == (SubmissionStatus.GRADED, 40, "my answer")

    def test_graded_submission_on_inactive_assignment(self, submission_service, assignment_service,
                                                      teacher, student, assignment):
        submission = submitted(submission_service, student, assignment)
        submission_service.grade(teacher, submission.id, 40)
        assignment_service.delete(teacher, assignment.id)

        with pytest.raises(ServiceError) as exc:
            submission_service.create_or_update(student, assignment.id, "too late")
        assert exc.value.code == ErrorCode.ALREADY_GRADED


class TestQueries:
    def test_teacher_lists_submissions_for_own_assignment(self, submission_service, make_user,
                                                          teacher, student, assignment):
        submitted(submission_service, student, assignment)
        page = submission_service.list_for_assignment(teacher, assignment.id)
        assert page.total == 1

        other = make_user(UserRole.TEACHER)
        with pytest.raises(ServiceError) as exc:
            submission_service.list_for_assignment(other, assignment.id)
        assert exc.value.code == ErrorCode.NOT_FOUND_OR_FORBIDDEN

    def test_student_lists_own_submissions_with_status_filter(self, submission_service, student, assignment):
        submitted(submission_service, student, assignment)
        assert submission_service.list_for_student(student, status=SubmissionStatus.SUBMITTED).total == 1
        assert submission_service.list_for_student(student, status=SubmissionStatus.GRADED).total == 0

    def test_other_student_cannot_view(self, submission_service, make_user, student, assignment):
        draft = submission_service.create_or_update(student, assignment.id, "answer")
        with pytest.raises(ServiceError) as exc:
            submission_service.get(make_user(UserRole.STUDENT), draft.id)
        assert exc.value.code == ErrorCode.FORBIDDEN
