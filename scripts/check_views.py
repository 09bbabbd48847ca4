#!/usr/bin/env python3
"""
SQL Views Check Script

Checks the database objects the API reads through:
1. jobs_public (anon role listing)
2. applications_admin_view
3. user_profile_view
4. stats_overview() function

Apply scripts/schema.sql first, then run: python scripts/check_views.py
"""
import asyncio
import sys
sys.path.insert(0, '.')

from jobboard.db.postgres import ANON, SERVICE, dispose_engines, execute_raw_sql

VIEWS = ("jobs_public", "applications_admin_view", "user_profile_view")


async def verify_views_exist() -> bool:
    rows = await execute_raw_sql(
        """
        SELECT table_name FROM information_schema.views
        WHERE table_schema = 'public' AND table_name = ANY(:names)
        """,
        {"names": list(VIEWS)},
    )
    found = {row["table_name"] for row in rows}
    for view in VIEWS:
        print(f"    {view}: {'OK' if view in found else 'MISSING'}")
    return found == set(VIEWS)


async def check_public_listing():
    print("\n[2] jobs_public as the anon role")
    rows = await execute_raw_sql(
        "SELECT id, title, is_active FROM jobs_public ORDER BY created_at DESC LIMIT 5",
        role=ANON,
    )
    inactive = [row for row in rows if not row["is_active"]]
    print(f"    {len(rows)} rows sampled, {len(inactive)} inactive (expected 0)")


async def check_admin_view():
    print("\n[3] applications_admin_view")
    rows = await execute_raw_sql(
        """
        SELECT id, job_title, user_email, status
        FROM applications_admin_view
        ORDER BY applied_at DESC LIMIT 5
        """,
        role=SERVICE,
    )
    for row in rows:
        print(f"    {row['id']}  {row['status']:<9} {row['job_title']} <{row['user_email']}>")


async def check_stats():
    print("\n[4] stats_overview()")
    rows = await execute_raw_sql("SELECT stats_overview() AS result")
    print(f"    {rows[0]['result']}")


async def main():
    print("=" * 50)
    print("JOB BOARD - VIEW CHECK")
    print("=" * 50)
    try:
        print("\n[1] Views present")
        if not await verify_views_exist():
            print("\n    Some views missing. Run in psql first:")
            print("    \\i scripts/schema.sql")
            return
        await check_public_listing()
        await check_admin_view()
        await check_stats()
        print("\nAll checks completed.")
    finally:
        await dispose_engines()


if __name__ == "__main__":
    asyncio.run(main())
