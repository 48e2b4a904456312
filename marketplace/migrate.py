# marketplace/migrate.py
"""
Tiny migration runner for additive schema changes.

    python -m marketplace.migrate up
    python -m marketplace.migrate down [steps]

Migrations live in marketplace/migrations/ and are applied in the order of
MIGRATIONS; each exposes `async up(conn)` / `async down(conn)`. Applied names
are recorded in the schema_migrations table.
"""
import sys
import asyncio
import importlib
from typing import List

from sqlalchemy import Column, MetaData, String, Table, inspect, select, insert, delete, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

MIGRATIONS = [
    "20240320000000_add_artisan_fields",
    "20240320000001_add_user_image",
]

_meta = MetaData()
schema_migrations = Table(
    "schema_migrations", _meta,
    Column("name", String(255), primary_key=True),
)


def load(name: str):
    return importlib.import_module(f"marketplace.migrations.{name}")


async def existing_columns(conn: AsyncConnection, table: str) -> set:
    return await conn.run_sync(lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns(table)})

async def add_column(conn: AsyncConnection, table: str, name: str, type_) -> None:
    if name in await existing_columns(conn, table):
        print(f"[MIGRATE] {table}.{name} already exists, skipping")
        return
    ddl_type = type_.compile(dialect=conn.dialect)
    await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl_type}"))

async def drop_column(conn: AsyncConnection, table: str, name: str) -> None:
    if name not in await existing_columns(conn, table):
        return
    await conn.execute(text(f"ALTER TABLE {table} DROP COLUMN {name}"))


async def applied(engine: AsyncEngine) -> List[str]:
    async with engine.begin() as conn:
        await conn.run_sync(_meta.create_all)
        r = await conn.execute(select(schema_migrations.c.name))
        done = {row[0] for row in r}
    return [m for m in MIGRATIONS if m in done]

async def upgrade(engine: AsyncEngine) -> List[str]:
    done = set(await applied(engine))
    ran = []
    for name in MIGRATIONS:
        if name in done:
            continue
        async with engine.begin() as conn:
            await load(name).up(conn)
            await conn.execute(insert(schema_migrations).values(name=name))
        print(f"[MIGRATE] applied {name}")
        ran.append(name)
    return ran

async def downgrade(engine: AsyncEngine, steps: int = 1) -> List[str]:
    """Revert the last `steps` applied migrations, newest first."""
    done = await applied(engine)
    reverted = []
    for name in reversed(done[-steps:] if steps > 0 else []):
        async with engine.begin() as conn:
            await load(name).down(conn)
            await conn.execute(delete(schema_migrations).where(schema_migrations.c.name == name))
        print(f"[MIGRATE] reverted {name}")
        reverted.append(name)
    return reverted


async def main(argv: List[str]) -> None:
    from marketplace.db import engine

    cmd = argv[0] if argv else "up"
    if cmd == "up":
        await upgrade(engine)
    elif cmd == "down":
        await downgrade(engine, int(argv[1]) if len(argv) > 1 else 1)
    else:
        raise SystemExit(f"unknown command {cmd!r} (expected 'up' or 'down')")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
