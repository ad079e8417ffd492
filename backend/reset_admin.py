"""
Reset an account password from the command line.

    python reset_admin.py                      # first admin, password from settings
    python reset_admin.py admin@example.com newpass
"""
import asyncio
import sys

from sqlalchemy import select

from trading_road.core.config import settings
from trading_road.core.security import get_password_hash
from trading_road.db.session import SessionLocal
from trading_road.models.user import User


async def reset_password(email: str, password: str) -> bool:
    async with SessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            return False
        user.password = get_password_hash(password)
        await db.commit()
        return True


if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else settings.FIRST_ADMIN_EMAIL
    password = sys.argv[2] if len(sys.argv) > 2 else settings.FIRST_ADMIN_PASSWORD
    if asyncio.run(reset_password(email, password)):
        print(f"Password reset for {email}")
    else:
        print(f"No account with e-mail {email}")
        sys.exit(1)
