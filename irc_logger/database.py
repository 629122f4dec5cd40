"""MongoDB connection: client, optional authentication, target collection."""

import logging

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from irc_logger.config import ConnectionConfig
from irc_logger.errors import ConnectError
from irc_logger.models import RAW_COLLECTION

logger = logging.getLogger(__name__)


def open_collection(config: ConnectionConfig, collection: str = RAW_COLLECTION,
                    client_factory=MongoClient, timeout_ms: int = 5000):
    """Connect, authenticate when credentials are set, and return the collection.

    pymongo connects lazily, so a ``ping`` is issued to surface unreachable
    servers and rejected credentials here rather than on the first insert.
    """
    kwargs = {"serverSelectionTimeoutMS": timeout_ms}
    if config.wants_auth:
        kwargs.update(username=config.user, password=config.password,
                      authSource=config.name)

    client = client_factory(config.host, config.port, **kwargs)
    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise ConnectError(
            f"Cannot connect to MongoDB at {config.host}:{config.port}: {exc}"
        ) from exc

    logger.info("Connected to MongoDB %s:%d, database=%s, auth=%s",
                config.host, config.port, config.name, config.wants_auth)
    return client[config.name][collection]
