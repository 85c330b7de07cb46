#!/usr/bin/env python3
"""Create the local demo account (demo / demo1234) if it does not exist yet."""

import asyncio
import sys

import logfire

from desk.config import Settings
from desk.domain.service import IdentityProvisioner, PasswordHasher, UserService
from desk.util.di.container import create_container
from desk.util.observability import configure_logfire

DEMO_USERNAME = "demo"
DEMO_EMAIL = "demo@blackdesk.local"
DEMO_PASSWORD = "demo1234"


async def seed() -> None:
    """Provision the demo user inside one request scope (one transaction)."""
    container = create_container()
    try:
        async with container() as request_container:
            user_service = await request_container.get(UserService)
            if await user_service.get_user_by_email(DEMO_EMAIL):
                logfire.info("Demo user already exists", email=DEMO_EMAIL)
                return

            password_hasher = await request_container.get(PasswordHasher)
            identity_provisioner = await request_container.get(IdentityProvisioner)

            user = await identity_provisioner.provision_local(
                password_hash=await password_hasher.hash(DEMO_PASSWORD),
                username=DEMO_USERNAME,
                email=DEMO_EMAIL,
                first_name="Demo",
                last_name="User",
            )
            logfire.info(
                "Demo user created", user_id=str(user.id), username=DEMO_USERNAME
            )
    finally:
        await container.close()


def main() -> int:
    """Seed the demo user and log any errors to Logfire."""
    settings = Settings()
    configure_logfire(settings)

    try:
        asyncio.run(seed())
        return 0
    except Exception as e:
        logfire.error(
            "Demo user seeding failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
