# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the job archive:
# - MongoSettings: MongoDB server connection configuration
# - JobArchiveSettings: job / trace database and collection names
# =============================================================================

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

__all__ = [
    "MongoSettings",
    "JobArchiveSettings",
]


# =============================================================================
# MongoDB Settings (Document Stores)
# =============================================================================

class MongoSettings(BaseSettings):
    """
    Configuration for the MongoDB server holding the job and trace stores.

    Maps environment variables with prefix "MONGO_":
    - MONGO_HOST → host
    - MONGO_PORT → port
    - MONGO_INITDB_ROOT_USERNAME → username
    - MONGO_INITDB_ROOT_PASSWORD → password
    - MONGO_DATABASE → database
    - MONGO_AUTH_SOURCE → auth_source

    Attributes:
        host: MongoDB host (default: "mongodb")
        port: MongoDB port (default: 27017)
        username: MongoDB username (maps from MONGO_INITDB_ROOT_USERNAME)
        password: MongoDB password (maps from MONGO_INITDB_ROOT_PASSWORD)
        database: Database used for bookkeeping such as schema_migrations
        auth_source: Authentication source (default: "admin")
    """

    host: str = Field("mongodb", validation_alias="MONGO_HOST", description="MongoDB host")
    port: int = Field(27017, validation_alias="MONGO_PORT", description="MongoDB port")
    username: str = Field(..., validation_alias="MONGO_INITDB_ROOT_USERNAME", description="MongoDB username (maps from MONGO_INITDB_ROOT_USERNAME)")
    password: str = Field(..., validation_alias="MONGO_INITDB_ROOT_PASSWORD", description="MongoDB password (maps from MONGO_INITDB_ROOT_PASSWORD)")
    database: str = Field("data_hub", validation_alias="MONGO_DATABASE", description="Bookkeeping database name")
    auth_source: str = Field("admin", validation_alias="MONGO_AUTH_SOURCE", description="Authentication source")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )

    @property
    def connection_string(self) -> str:
        """
        Build MongoDB connection URI.

        Format: mongodb://[username]:[password]@[host]:[port]/?authSource=[auth_source]

        The job and trace stores live in their own databases, so the URI
        carries no default database.

        Returns:
            MongoDB connection URI string
        """
        return (
            f"mongodb://{self.username}:{self.password}@"
            f"{self.host}:{self.port}/?authSource={self.auth_source}"
        )


# =============================================================================
# Job Archive Settings (Job / Trace Stores)
# =============================================================================

class JobArchiveSettings(BaseSettings):
    """
    Location of the job and trace stores.

    Jobs and traces are kept in two independent databases, mirroring the
    pipeline engine's layout. Nothing ties the two together except the
    ``jobId`` back-reference carried by each trace.

    Maps environment variables:
    - JOBS_DATABASE → jobs_database
    - JOBS_COLLECTION → jobs_collection
    - TRACES_DATABASE → traces_database
    - TRACES_COLLECTION → traces_collection
    - MONGO_SERVER_SELECTION_TIMEOUT_MS → server_selection_timeout_ms
    """

    jobs_database: str = Field("data_hub_jobs", validation_alias="JOBS_DATABASE", description="Job store database")
    jobs_collection: str = Field("jobs", validation_alias="JOBS_COLLECTION", description="Job store collection")
    traces_database: str = Field("data_hub_traces", validation_alias="TRACES_DATABASE", description="Trace store database")
    traces_collection: str = Field("traces", validation_alias="TRACES_COLLECTION", description="Trace store collection")
    server_selection_timeout_ms: int = Field(
        10000,
        validation_alias="MONGO_SERVER_SELECTION_TIMEOUT_MS",
        description="How long the client waits for a reachable server",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )
