# scripts/promote_admin.py
"""이메일로 유저를 ADMIN으로 승격. 사용: python scripts/promote_admin.py someone@example.com"""
import argparse
import asyncio
import os
import sys

# 모듈 경로 설정
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.database import create_database
from app.repositories import user_repository

# 윈도우 환경 asyncio 에러 방지
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


async def promote(email: str) -> int:
    database = create_database(settings)
    if database is None:
        print("❌ DATABASE_URL이 설정되지 않았습니다.")
        return 1
    try:
        async with database.transaction() as session:
            user_id = await user_repository.promote_to_admin(session, email)
    finally:
        await database.dispose()
    if user_id is None:
        print(f"❌ {email} 유저를 찾을 수 없습니다. 먼저 한 번 로그인해야 합니다.")
        return 1
    print(f"✅ user_id={user_id} ({email}) → ADMIN")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Promote a user to ADMIN by email")
    parser.add_argument("email")
    args = parser.parse_args()
    sys.exit(asyncio.run(promote(args.email)))


if __name__ == "__main__":
    main()
