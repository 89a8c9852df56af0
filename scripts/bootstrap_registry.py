#!/usr/bin/env python3
"""Bootstrap the document verification registry.

Creates the registry tables, initializes the registry with the deploying
identity as administrator and sole verifier, and prints the resulting
administrator and verifier set. Optionally registers a smoke-test document
and prints its record.

Usage:
    VERIFICATION_DATABASE_URL=postgresql+asyncpg://... \\
        python scripts/bootstrap_registry.py --administrator 0xabc...
    python scripts/bootstrap_registry.py --administrator 0xabc... --smoke-hash 0xfeed
"""

import argparse
import asyncio
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from services.document_verification.app.config import get_settings  # noqa: E402
from services.document_verification.app.core.errors import RegistryError  # noqa: E402
from services.document_verification.app.core.fingerprint import canonicalize  # noqa: E402
from services.document_verification.app.db.models import Base  # noqa: E402
from services.document_verification.app.db.repository import RegistryRepository  # noqa: E402
from services.document_verification.app.events.publisher import DocumentEventPublisher  # noqa: E402
from services.document_verification.app.execution import RegistryExecutor  # noqa: E402
from shared.utils.db import close_db, create_tables, get_db_session, init_db  # noqa: E402
from shared.utils.logging import configure_logging  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bootstrap the verification registry")
    parser.add_argument(
        "--administrator",
        default=None,
        help="Deploying identity (defaults to VERIFICATION_ADMINISTRATOR)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (defaults to VERIFICATION_DATABASE_URL)",
    )
    parser.add_argument(
        "--smoke-hash",
        default=None,
        help="Register a smoke-test document with this hash string",
    )
    parser.add_argument("--smoke-title", default="Bootstrap smoke test")
    return parser.parse_args()


async def bootstrap(args: argparse.Namespace) -> int:
    """Run the bootstrap steps, returning the process exit code."""
    settings = get_settings()
    administrator = args.administrator or settings.administrator
    if not administrator:
        print("\nError: no administrator identity given")
        print("Pass --administrator or set VERIFICATION_ADMINISTRATOR")
        return 1

    print("=" * 60)
    print("Document Verification Registry Bootstrap")
    print("=" * 60)

    print("\n1. Creating tables...")
    init_db(
        database_url=args.database_url or settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        echo=settings.db_echo,
    )
    await create_tables(Base.metadata)
    print(f"   - Tables: {', '.join(sorted(Base.metadata.tables))}")

    print("\n2. Initializing registry...")
    async with get_db_session() as session:
        repository = RegistryRepository(session)
        effective, created = await repository.initialize(administrator)
        await session.commit()
        verifiers = await repository.list_verifiers()

    if created:
        print(f"   - Initialized with administrator {effective}")
    else:
        print(f"   - Already initialized; administrator is {effective}")
        if effective != administrator:
            print(f"   - Warning: requested administrator {administrator} was not applied")

    print("\n3. Registry status:")
    print(f"   - Administrator: {effective}")
    print(f"   - Verifiers ({len(verifiers)}):")
    for verifier in verifiers:
        print(f"     * {verifier}")

    if args.smoke_hash:
        print("\n4. Registering smoke-test document...")
        executor = RegistryExecutor()
        fingerprint = canonicalize(args.smoke_hash)
        async with get_db_session() as session:
            try:
                await executor.execute(
                    "register_document",
                    lambda r: r.register_document(effective, args.smoke_hash, args.smoke_title),
                    session=session,
                    publisher=DocumentEventPublisher(None),
                    fingerprints=[fingerprint],
                )
            except RegistryError as e:
                print(f"   - Registration rejected: {e.error_code} ({e.message})")

            record = await executor.query(
                lambda r: r.get_document(args.smoke_hash),
                session=session,
                fingerprints=[fingerprint],
            )

        print("   - Record:")
        for key, value in record.to_schema().model_dump(mode="json").items():
            print(f"     {key}: {value}")

    await close_db()

    print("\n" + "=" * 60)
    print("Bootstrap completed")
    print("=" * 60)
    return 0


def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging(
        service_name=f"{settings.service_name}-bootstrap",
        log_level=settings.log_level,
        json_format=False,
    )
    sys.exit(asyncio.run(bootstrap(args)))


if __name__ == "__main__":
    main()
