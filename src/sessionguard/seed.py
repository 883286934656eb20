"""
sessionguard.seed

Bootstrap command: `python -m sessionguard.seed`.

Creates the tables (unless `--no-init`) and the root admin user, then prints
the `Authorization` header for its first session.
"""

from __future__ import annotations

import argparse
import asyncio

from sessionguard.db.init_db import init_db
from sessionguard.db.session import create_engine, create_sessionmaker, session_scope
from sessionguard.observability.logging import configure_logging
from sessionguard.services.provisioning import ProvisioningService
from sessionguard.settings import Settings, get_settings


async def seed_root(settings: Settings, *, create_tables: bool = True) -> str:
    engine = create_engine(settings)
    try:
        if create_tables:
            await init_db(engine)
        async with session_scope(create_sessionmaker(engine)) as session:
            svc = ProvisioningService(session=session, settings=settings)
            provisioned = await svc.create_root_admin_user()
        return provisioned.auth_header
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="sessionguard.seed", description=__doc__)
    parser.add_argument("--database-url", help="overrides SG_DATABASE_URL")
    parser.add_argument("--no-init", action="store_true", help="do not create tables")
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.database_url:
        settings = settings.model_copy(update={"database_url": args.database_url})
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    header = asyncio.run(seed_root(settings, create_tables=not args.no_init))
    print(f"Authorization: {header}")


if __name__ == "__main__":
    main()
