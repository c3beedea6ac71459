from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from chat.sechat.directory.model.base import Base
from chat.sechat.directory.store.aliases import AliasTable
from chat.sechat.directory.store.contacts import ContactTable
from chat.sechat.directory.store.groups import GroupTable
from chat.sechat.directory.store.meta import MetaTable
from chat.sechat.directory.store.private_key import PrivateKeyTable
from chat.sechat.directory.store.profile import ProfileTable
from chat.sechat.directory.store.users import UserTable


class CredentialStore:
    """
    Persistent credential tables sharing one database engine.

    The tables are independent: a write to one never depends on a write to another,
    so callers must tolerate partial failure (for example a Meta saved while the
    matching Profile save fails).
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        session_maker = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        dialect_name = engine.dialect.name

        self.metas = MetaTable(session_maker, dialect_name)
        self.profiles = ProfileTable(session_maker, dialect_name)
        self.private_keys = PrivateKeyTable(session_maker, dialect_name)
        self.contacts = ContactTable(session_maker, dialect_name)
        self.groups = GroupTable(session_maker, dialect_name)
        self.users = UserTable(session_maker, dialect_name)
        self.aliases = AliasTable(session_maker, dialect_name)

    async def create_all(self) -> None:
        """Create any missing tables. Server deployments use the Alembic revisions instead."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
