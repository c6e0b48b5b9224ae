"""
Create an administrator account, or re-enable an existing one
Run: python create_admin.py admin@example.com "Admin" "User"
Admins cannot self-register through the API, and an existing account
with another role is never converted.
"""
import getpass
import sys
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from loguru import logger  # noqa: E402

from tinylearn.api.auth import PASSWORD_PATTERN, get_password_hash  # noqa: E402
from tinylearn.models.database_models import AccountStatus, UserRole  # noqa: E402
from tinylearn.models.repositories import UserRepository  # noqa: E402


def ensure_admin(users: UserRepository, email: str, first_name: str = "Admin",
                 last_name: str = "User", read_password=getpass.getpass) -> int:
    email = email.strip().lower()
    user = users.get_by_email(email)
    if user is not None:
        if user.role != UserRole.ADMIN:
            logger.error(f"{email} is registered as {user.role.value}; roles cannot be changed")
            return 1
        user.account_status = AccountStatus.APPROVED
        user.is_active = True
        users.save(user)
        logger.info(f"Existing admin {email} re-approved and reactivated")
        return 0

    password = read_password("Password: ")
    if not PASSWORD_PATTERN.match(password):
        logger.error("Password must be at least 8 characters long and contain a capital letter and a number")
        return 1
    users.create(
        first_name=first_name,
        last_name=last_name,
        email=email,
        hashed_password=get_password_hash(password),
        role=UserRole.ADMIN,
        account_status=AccountStatus.APPROVED,
    )
    logger.info(f"Admin {email} created")
    return 0


def main(argv) -> int:
    from tinylearn.models.database import SessionLocal, create_tables

    if len(argv) < 2:
        print(__doc__)
        return 1
    first_name = argv[2] if len(argv) > 2 else "Admin"
    last_name = argv[3] if len(argv) > 3 else "User"

    create_tables()
    db = SessionLocal()
    try:
        return ensure_admin(UserRepository(db), argv[1], first_name, last_name)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main(sys.argv))
