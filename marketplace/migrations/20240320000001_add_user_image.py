# marketplace/migrations/20240320000001_add_user_image.py
from sqlalchemy import String
from marketplace.migrate import add_column, drop_column

async def up(conn):
    await add_column(conn, "users", "image_url", String())

async def down(conn):
    await drop_column(conn, "users", "image_url")
