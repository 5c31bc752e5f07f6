import os


def db_config_from_env(*, default_password: str = "", default_timeout: str = "10") -> dict:
    """mysql-connector settings dict shared by every environment module."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "membership_db"),
        "connection_timeout": float(os.getenv("DB_CONNECTION_TIMEOUT", default_timeout)),
    }


# Independent reads (profile, localities, per-source attendance) are joined
# with this timeout; a slower read surfaces as a retryable storage error.
QUERY_TIMEOUT_SECONDS = float(os.getenv("QUERY_TIMEOUT_SECONDS", "10"))

# Members per attendance read.
READ_CHUNK_SIZE = int(os.getenv("READ_CHUNK_SIZE", "200"))

LOG_DIR = os.getenv("LOG_DIR") or None
