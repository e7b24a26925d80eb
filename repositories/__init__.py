from contextlib import contextmanager

from pymongo.errors import PyMongoError

from errors import StoreUnavailable
from logging_config import get_logger

logger = get_logger("repositories")


def parse_mongo_data(data):
    """Drop Mongo's internal _id so documents serialize cleanly."""
    if isinstance(data, list):
        return [parse_mongo_data(item) for item in data]
    if isinstance(data, dict):
        return {k: parse_mongo_data(v) for k, v in data.items() if k != "_id"}
    return data


@contextmanager
def store_errors(operation: str):
    """Translate driver failures into StoreUnavailable."""
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Store operation '{operation}' failed: {e}", extra={"data": {"operation": operation}})
        raise StoreUnavailable(f"Notification store unavailable during {operation}") from e
