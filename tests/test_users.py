import pytest

from tinylearn.models.database_models import AccountStatus, AchievementType, ParentRelationship, UserRole
from tinylearn.models.repositories import AchievementRepository
from tinylearn.services.errors import ErrorCode, ServiceError


def register(service, email="new@example.com", role=UserRole.STUDENT):
    return service.register("Ada", "Lovelace", email, "not-a-real-hash", role=role)


class TestRegistration:
    def test_student_is_approved_immediately(self, user_service):
        user = register(user_service, email="  Ada@Example.com ")
        assert user.email == "ada@example.com"
        assert user.account_status == AccountStatus.APPROVED
        user_service.check_can_login(user)

    def test_teacher_waits_for_approval(self, user_service):
        user = register(user_service, role=UserRole.TEACHER)
        assert user.account_status == AccountStatus.PENDING
        with pytest.raises(ServiceError) as exc:
            user_service.check_can_login(user)
        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_duplicate_email(self, user_service):
        register(user_service)
        with pytest.raises(ServiceError) as exc:
            register(user_service, email="NEW@example.com")
        assert exc.value.code == ErrorCode.CONFLICT

    def test_record_login_uses_clock(self, user_service, student, clock):
        assert user_service.record_login(student).last_login == clock()

    def test_profile_update_ignores_unknown_fields(self, user_service, student):
        user = user_service.update_profile(student, {"grade": "2", "role": UserRole.ADMIN})
        assert user.grade == "2"
        assert user.role == UserRole.STUDENT


class TestAdministration:
    def test_admin_approves_teacher(self, user_service, admin):
        teacher = register(user_service, role=UserRole.TEACHER)
        user_service.set_account_status(admin, teacher.id, AccountStatus.APPROVED)
        user_service.check_can_login(user_service.get(teacher.id))

    def test_suspended_and_deactivated_users_cannot_log_in(self, user_service, admin, make_user):
        suspended, removed = make_user(UserRole.STUDENT), make_user(UserRole.STUDENT)
        user_service.set_account_status(admin, suspended.id, AccountStatus.SUSPENDED)
        user_service.deactivate(admin, removed.id)
        for user in (suspended, removed):
            with pytest.raises(ServiceError):
                user_service.check_can_login(user_service.get(user.id))

    def test_admin_cannot_deactivate_self(self, user_service, admin):
        with pytest.raises(ServiceError) as exc:
            user_service.deactivate(admin, admin.id)
        assert exc.value.code == ErrorCode.VALIDATION

    def test_non_admin_is_refused(self, user_service, teacher, student):
        with pytest.raises(ServiceError) as exc:
            user_service.deactivate(teacher, student.id)
        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_list_users_by_role(self, user_service, admin, teacher, student, parent):
        assert [u.id for u in user_service.list_users(admin, UserRole.PARENT)] == [parent.id]
        assert len(user_service.list_users(admin)) == 4

    def test_system_stats(self, user_service, admin, teacher, student, lesson):
        register(user_service, email="pending@example.com", role=UserRole.TEACHER)
        stats = user_service.system_stats(admin)
        assert stats.users_by_role[UserRole.TEACHER.value] == 2
        assert stats.users_by_role[UserRole.STUDENT.value] == 1
        assert stats.pending_teachers == 1
        assert stats.active_lessons == 1


class TestParentLinks:
    def test_link_and_list_children(self, user_service, admin, parent, student):
        link = user_service.link_parent(admin, parent.id, student.id, ParentRelationship.MOTHER,
                                        is_primary=True)
        assert link.relationship_type == ParentRelationship.MOTHER
        children = user_service.list_children(parent)
        assert [c.student_id for c in children] == [student.id]

    def test_duplicate_link(self, user_service, admin, parent, student):
        user_service.link_parent(admin, parent.id, student.id)
        with pytest.raises(ServiceError) as exc:
            user_service.link_parent(admin, parent.id, student.id)
        assert exc.value.code == ErrorCode.CONFLICT

    def test_roles_are_checked(self, user_service, admin, teacher, student):
        with pytest.raises(ServiceError) as exc:
            user_service.link_parent(admin, teacher.id, student.id)
        assert exc.value.code == ErrorCode.VALIDATION

    def test_only_parents_list_children(self, user_service, student):
        with pytest.raises(ServiceError) as exc:
            user_service.list_children(student)
        assert exc.value.code == ErrorCode.FORBIDDEN


def test_achievements_and_points(db, user_service, student):
    repo = AchievementRepository(db)
    repo.create(user_id=student.id, title="First steps", description="Finished a lesson",
                achievement_type=AchievementType.COMPLETION, points=10)
    repo.create(user_id=student.id, title="On a roll", description="Three days in a row",
                achievement_type=AchievementType.STREAK, points=25)
    assert len(user_service.list_achievements(student)) == 2
    assert user_service.achievement_points(student) == 35
