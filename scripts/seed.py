#!/usr/bin/env python
"""
Seed reserved roles (and demo administrators) for development.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select


# Add src to path for imports
sys.path.insert(0, "src")

from tenant_roles.core.constants import ADMIN_ROLE, USER_ROLE
from tenant_roles.core.database import async_session_factory, init_db
from tenant_roles.modules.roles.defaults import seed_reserved_roles
from tenant_roles.modules.users.models import User


DEMO_PROVIDERS = [
    {"provider": "acme", "admin": "Ada Admin", "member": "Alice Member"},
    {"provider": "globex", "admin": "Gus Admin", "member": "Gina Member"},
    {"provider": "initech", "admin": "Ivy Admin", "member": "Ian Member"},
]


async def seed_provider(provider: str) -> None:
    """Create the reserved roles of one provider."""
    async with async_session_factory() as session:
        roles = await seed_reserved_roles(session, provider)
        await session.commit()
        summary = ", ".join(f"{role.name}:{role.priority}" for role in roles)
        print(f"Reserved roles for {provider}: {summary}")


async def seed_demo() -> None:
    """Create demo providers, each with an admin and a regular member."""
    async with async_session_factory() as session:
        for data in DEMO_PROVIDERS:
            provider = data["provider"]
            roles = {role.name: role for role in await seed_reserved_roles(session, provider)}

            for label, role_name in (("admin", ADMIN_ROLE), ("member", USER_ROLE)):
                email = f"{label}@{provider}.io"
                result = await session.execute(
                    select(User).where(User.provider == provider, User.email == email)
                )
                if result.scalar_one_or_none():
                    print(f"User already exists: {email}")
                    continue

                user = User(email=email, name=data[label], provider=provider)
                user.roles = [roles[role_name]]
                session.add(user)
                await session.flush()
                print(f"Created {role_name} {email} (uid {user.uid})")

        await session.commit()


async def main(scenario: str, provider: str, create_tables: bool) -> None:
    """Run the seeding based on scenario."""
    if create_tables:
        await init_db()

    if scenario == "default":
        await seed_provider(provider)
    elif scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with reserved roles")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    parser.add_argument(
        "--provider",
        "-p",
        default="default",
        help="Provider to seed in the default scenario",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario, args.provider, args.create_tables))
