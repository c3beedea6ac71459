import contextlib
import logging
from typing import AsyncIterator, Optional

import redis.asyncio as redis
import sentry_sdk
from sqlalchemy.ext.asyncio import create_async_engine

from chat.sechat.directory.app.config import Settings
from chat.sechat.directory.app.metrics import create_metrics_client
from chat.sechat.directory.directory import IdentityDirectory
from chat.sechat.directory.immortals import Immortals
from chat.sechat.directory.queries import ProfileQueryQueue
from chat.sechat.directory.store.credentials import CredentialStore

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def directory_context(
    settings: Optional[Settings] = None,
) -> AsyncIterator[IdentityDirectory]:
    """
    Build an IdentityDirectory from settings and release its connections on exit.
    """
    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, send_default_pii=False)

    logger.info("Starting up")

    immortals = Immortals.load(settings.immortals_path)

    engine = create_async_engine(settings.database_dsn)
    redis_client = None
    metrics = None
    try:
        store = CredentialStore(engine)
        await store.create_all()

        queries = None
        if settings.redis_dsn is not None:
            redis_client = redis.from_url(str(settings.redis_dsn))
            queries = ProfileQueryQueue(redis_client, settings.profile_query_queue)

        metrics = await create_metrics_client(
            settings.metrics_backend,
            host=settings.statsd_host,
            port=settings.statsd_port,
            prefix=settings.statsd_prefix,
            debug=settings.debug,
        )

        logger.info("Startup complete")

        yield IdentityDirectory(
            store,
            immortals,
            queries=queries,
            metrics=metrics,
            profile_expires=settings.profile_expires,
        )
    finally:
        if metrics is not None:
            await metrics.close()
        if redis_client is not None:
            await redis_client.aclose()
        await engine.dispose()
