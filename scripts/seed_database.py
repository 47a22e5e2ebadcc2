"""Development seeding script (one house, five members)"""
import asyncio
import uuid

from sqlalchemy import select

from house_ledger.core.security import create_access_token
from house_ledger.database import AsyncSessionLocal, Base, engine
from house_ledger.models import HouseMember, InviteStatus, Profile

# Stable IDs so re-running the script finds the same rows
DEMO_HOUSE_ID = uuid.uuid5(uuid.NAMESPACE_URL, "house-ledger/demo-house")

MEMBERS = [
    {"display_name": "Alex", "venmo_handle": "alex-demo"},
    {"display_name": "Blair", "venmo_handle": "blair-demo"},
    {"display_name": "Casey", "venmo_handle": None},
    {"display_name": "Devon", "venmo_handle": "devon-demo"},
    {"display_name": "Emery", "venmo_handle": None},
]


def member_id(display_name: str) -> uuid.UUID:
    return uuid.uuid5(DEMO_HOUSE_ID, display_name)


async def create_tables():
    """Create any missing tables from the ORM metadata"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_house():
    """Seed the demo house with accepted members"""
    async with AsyncSessionLocal() as session:
        created_count = 0
        skipped_count = 0

        for member in MEMBERS:
            profile_id = member_id(member["display_name"])
            result = await session.execute(select(Profile).where(Profile.id == profile_id))

            if result.scalar_one_or_none():
                print(f"  ⏭️  {member['display_name']} already exists, skipping...")
                skipped_count += 1
                continue

            session.add(Profile(id=profile_id, **member))
            session.add(
                HouseMember(
                    house_id=DEMO_HOUSE_ID,
                    user_id=profile_id,
                    invite_status=InviteStatus.ACCEPTED,
                )
            )
            print(f"  ✅ Added {member['display_name']} to the demo house")
            created_count += 1

        await session.commit()

        print("\n📊 Summary:")
        print(f"  House: {DEMO_HOUSE_ID}")
        print(f"  Created: {created_count} members")
        print(f"  Skipped: {skipped_count} members (already exist)")


def print_tokens():
    """Print a development bearer token for each member"""
    print("\n🔐 Development tokens:")
    for member in MEMBERS:
        token = create_access_token(str(member_id(member["display_name"])))
        print(f"  {member['display_name']}: {token}")


async def main():
    """Main function to run seeding"""
    print("🌱 Seeding database with a demo house...\n")

    try:
        await create_tables()
        await seed_house()
        print_tokens()
        print("\n✨ Database seeding completed successfully!")
    except Exception as e:
        print(f"\n❌ Error seeding database: {str(e)}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
