# path: stuntpitch/db/base.py
# Purpose: declarative base shared by every ORM model and by Alembic.
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
