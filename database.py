from motor.motor_asyncio import AsyncIOMotorClient
from logging_config import get_logger
from config import config
import certifi

logger = get_logger("database")

uri = config.MONGO_URI
db_name = config.DB_NAME

if uri:
    logger.info(f"MongoDB connection string found: {uri[:20]}...")
else:
    logger.error("MONGO_URI not found in configuration!")


class DatabaseProxy:
    """Creates the Motor client on first use, so importing this module never opens a connection."""

    def __init__(self):
        self._client = None
        self._db = None

    def initialize(self):
        if self._client is not None:
            return
        # Atlas needs the certifi CA bundle; local Mongo does not
        options = {"tlsCAFile": certifi.where()} if config.ENV == "production" else {}
        self.use(AsyncIOMotorClient(uri, **options))
        logger.info(f"Database collections initialized on DB: {db_name}")

    def use(self, motor_client):
        """Swap in an already constructed Motor-compatible client (tests, scripts)."""
        self._client = motor_client
        self._db = motor_client[db_name]

    def reset(self):
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None

    @property
    def database(self):
        self.initialize()
        return self._db

    def __getattr__(self, name):
        self.initialize()
        return getattr(self._client, name)

    def __getitem__(self, name):
        self.initialize()
        return self._client[name]


client = DatabaseProxy()


class DBProxy:
    """Attribute or item access yields a collection of the configured database."""

    def get_collection(self, name):
        return client.database[name]

    __getattr__ = get_collection
    __getitem__ = get_collection


db = DBProxy()


class AsyncCollectionProxy:
    """Module-level handle that resolves the real collection on every access."""

    def __init__(self, name):
        self.name = name

    def __getattr__(self, attr):
        return getattr(db.get_collection(self.name), attr)

    def __getitem__(self, key):
        return db.get_collection(self.name)[key]

    def __repr__(self):
        return f"<AsyncCollectionProxy {db_name}.{self.name}>"


# Written by this service
notification_logs_collection = AsyncCollectionProxy("notification_logs")
notification_settings_collection = AsyncCollectionProxy("notification_settings")
push_subscriptions_collection = AsyncCollectionProxy("push_subscriptions")

# Owned by the accounts, logging and social services; only read here
users_collection = AsyncCollectionProxy("users")
daily_logs_collection = AsyncCollectionProxy("daily_logs")
user_goals_collection = AsyncCollectionProxy("user_goals")
live_activities_collection = AsyncCollectionProxy("live_activities")
live_activity_participants_collection = AsyncCollectionProxy("live_activity_participants")
