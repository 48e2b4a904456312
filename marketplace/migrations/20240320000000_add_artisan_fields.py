# marketplace/migrations/20240320000000_add_artisan_fields.py
from sqlalchemy import String, Text
from marketplace.migrate import add_column, drop_column

COLUMNS = [
    ("bio", Text()),
    ("location", String()),
    ("specialties", Text()),
    ("experience", Text()),
]

async def up(conn):
    for name, type_ in COLUMNS:
        await add_column(conn, "users", name, type_)

async def down(conn):
    for name, _ in reversed(COLUMNS):
        await drop_column(conn, "users", name)
