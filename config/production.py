import os

from .config import LOG_DIR, QUERY_TIMEOUT_SECONDS, READ_CHUNK_SIZE, db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env(default_timeout="5")

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
