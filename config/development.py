import os

from .config import LOG_DIR, QUERY_TIMEOUT_SECONDS, READ_CHUNK_SIZE, db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
