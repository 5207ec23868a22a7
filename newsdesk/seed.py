from __future__ import annotations

import argparse
import asyncio
from typing import Any, Optional, Sequence

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import AppError
from newsdesk.core.logging import setup_logging
from newsdesk.core.security import hash_password
from newsdesk.models import Category, User, UserRole, default_avatar_url
from newsdesk.models.base import utc_now_iso
from newsdesk.repositories import CategoryRepository, UserRepository
from newsdesk.services.auth import temporary_password
from newsdesk.services.normalize import normalize_email
from newsdesk.store import DocumentStore, build_store
from newsdesk.store.base import chunked

logger = structlog.get_logger()

CATEGORY_SEEDS: list[dict[str, Any]] = [
    {
        "id": "c_demo_environment",
        "name": "Climate & Environment",
        "slug": "climate-environment",
        "description": "Stories about sustainability, conservation, and climate resilience.",
    },
    {
        "id": "c_demo_culture",
        "name": "Culture & Lifestyle",
        "slug": "culture-lifestyle",
        "description": "Arts, travel, food, and the people shaping everyday life.",
    },
    {
        "id": "c_demo_technology",
        "name": "Technology & Innovation",
        "slug": "technology-innovation",
        "description": "Coverage of startups, civic tech, AI, and cutting-edge research.",
    },
    {
        "id": "c_demo_business",
        "name": "Business & Economy",
        "slug": "business-economy",
        "description": "Insights into markets, entrepreneurship, finance, and the future of work.",
    },
    {
        "id": "c_demo_sports",
        "name": "Sports",
        "slug": "sports",
        "description": "Match reports, profiles and the business of sport.",
    },
]


class SeedError(AppError):
    default_message = "Seeding failed; re-run the whole seed"


async def batch_write(store: DocumentStore, table: str, items: Sequence[dict[str, Any]]) -> int:
    for chunk in chunked(items):
        unprocessed = await store.batch_put(table, chunk)
        if unprocessed:
            # no partial bookkeeping: the caller re-runs everything
            raise SeedError(f"{len(unprocessed)} item(s) were not written to {table}", table=table)
    return len(items)


async def seed_categories(store: DocumentStore, settings: Settings, seeds: Sequence[dict[str, Any]] = CATEGORY_SEEDS) -> int:
    repo = CategoryRepository(store, settings)
    now = utc_now_iso()
    pending = []
    for seed in seeds:
        if await repo.get_by_id(seed["id"]) or await repo.find_by_slug(seed["slug"]):
            logger.info("seed_category_skipped", slug=seed["slug"])
            continue
        category = Category(**seed, created_at=now, updated_at=now)
        pending.append(repo.to_db(category))

    written = await batch_write(store, settings.categories_table, pending)
    logger.info("seed_categories_done", written=written, skipped=len(seeds) - written)
    return written


async def seed_admin(
    store: DocumentStore,
    settings: Settings,
    email: str,
    name: str = "Admin User",
    password: Optional[str] = None,
) -> Optional[str]:
    """Create the initial admin. Returns the plain password, or None when the admin already exists."""
    repo = UserRepository(store, settings)
    email = normalize_email(email)
    if await repo.find_by_email(email):
        logger.info("seed_admin_skipped", email=email)
        return None

    plain = password or temporary_password()
    admin = User.create(
        name=name,
        email=email,
        password=hash_password(plain, settings.bcrypt_rounds),
        role=UserRole.ADMIN,
        avatar_url=default_avatar_url(name),
    )
    await batch_write(store, settings.users_table, [repo.to_db(admin)])
    logger.info("seed_admin_created", user_id=admin.id, email=email)
    return plain


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m newsdesk.seed", description="Seed demo categories and an admin user.")
    parser.add_argument("--backend", choices=["memory", "sqlite", "dynamodb"], help="override STORE_BACKEND")
    parser.add_argument("--db-path", help="override DB_PATH for the sqlite backend")
    parser.add_argument("--admin-email", default="admin@example.com")
    parser.add_argument("--admin-name", default="Admin User")
    parser.add_argument("--admin-password", help="generated when omitted")
    parser.add_argument("--skip-admin", action="store_true")
    parser.add_argument("--skip-categories", action="store_true")
    return parser


async def run(args: argparse.Namespace, settings: Settings, store: Optional[DocumentStore] = None) -> dict[str, Any]:
    store = store or build_store(settings)
    result: dict[str, Any] = {"categories": 0, "adminPassword": None}
    try:
        await store.create_schema()
        if not args.skip_categories:
            result["categories"] = await seed_categories(store, settings)
        if not args.skip_admin:
            result["adminPassword"] = await seed_admin(
                store, settings, args.admin_email, args.admin_name, args.admin_password
            )
    finally:
        await store.close()
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    overrides = {}
    if args.backend:
        overrides["STORE_BACKEND"] = args.backend
    if args.db_path:
        overrides["DB_PATH"] = args.db_path
    settings = Settings(**overrides)
    setup_logging(settings.log_level)

    try:
        result = asyncio.run(run(args, settings))
    except SeedError as e:
        logger.error("seed_failed", error=e.message, **e.context)
        return 1

    print(f"Seeded {result['categories']} categories.")
    if result["adminPassword"]:
        print(f"Admin {args.admin_email} created with password: {result['adminPassword']}")
        print("Change this password after first login.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
