import logging
from pymongo import MongoClient, ReadPreference
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from wellengine.config import settings

logger = logging.getLogger(__name__)


class WellsMongoClient:
    """
    Wrapper for the MongoDB connection holding wells and well metrics.
    The engine only reads, so the database handle prefers secondaries.
    """

    def __init__(self, uri: str = None, db_name: str = None):
        self._uri = uri or settings.MONGO_URI
        self._db_name = db_name or settings.MONGO_DB_NAME
        self._client: MongoClient = None

    def connect(self) -> None:
        """
        Establishes the MongoDB connection.
        Raises on missing configuration or an unreachable server.
        """
        if not self._uri:
            raise ValueError("MONGO_URI environment variable is not set.")

        try:
            # Connect with a timeout to fail fast if DB is unreachable
            self._client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000
            )
            self._client.admin.command('ping')
            logger.info(f"Connected to MongoDB, database '{self._db_name}'.")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.critical(f"Failed to connect to MongoDB: {e}")
            raise e

    def get_db(self) -> Database:
        if not self._client:
            self.connect()

        return self._client.get_database(
            self._db_name,
            read_preference=ReadPreference.SECONDARY_PREFERRED
        )

    def close(self):
        """Closes the connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed.")


# Singleton instance for easy import across modules
mongo_client = WellsMongoClient()
