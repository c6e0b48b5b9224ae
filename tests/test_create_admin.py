from create_admin import ensure_admin
from tinylearn.models.database_models import AccountStatus, UserRole
from tinylearn.models.repositories import UserRepository


def _no_prompt(prompt):
    raise AssertionError("password should not be requested")


def test_creates_new_admin(db):
    users = UserRepository(db)
    assert ensure_admin(users, " Root@Example.com ", read_password=lambda prompt: "Rootpass1") == 0

    admin = users.get_by_email("root@example.com")
    assert admin.role == UserRole.ADMIN
    assert admin.account_status == AccountStatus.APPROVED


def test_weak_password_creates_nothing(db):
    users = UserRepository(db)
    assert ensure_admin(users, "root@example.com", read_password=lambda prompt: "short") == 1
    assert users.get_by_email("root@example.com") is None


def test_existing_non_admin_keeps_its_role(db, teacher):
    users = UserRepository(db)
    assert ensure_admin(users, teacher.email, read_password=_no_prompt) == 1

    db.refresh(teacher)
    assert teacher.role == UserRole.TEACHER


def test_existing_admin_is_reenabled(db, make_user):
    admin = make_user(UserRole.ADMIN, status=AccountStatus.SUSPENDED)
    admin.is_active = False
    db.commit()

    assert ensure_admin(UserRepository(db), admin.email, read_password=_no_prompt) == 0
    db.refresh(admin)
    assert admin.role == UserRole.ADMIN
    assert admin.account_status == AccountStatus.APPROVED
    assert admin.is_active is True
