from typing import Any, Callable

from sqlalchemy import String, orm
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import mapped_column

from typing_extensions import Annotated

str512 = Annotated[str, 512]
str1024 = Annotated[str, 1024]
guidpk = Annotated[str, mapped_column(String(512), primary_key=True)]


class Base(orm.DeclarativeBase):
    type_annotation_map = {
        str512: String(512),
        str1024: String(1024),
        guidpk: String(512),
    }


def insert_for(dialect_name: str) -> Callable[[Any], Any]:
    """Return the dialect `insert` construct that supports ON CONFLICT clauses."""
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise ValueError(f"unsupported database dialect: {dialect_name}")
