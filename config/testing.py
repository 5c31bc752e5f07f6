from .config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_timeout="2")

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_DIR = None

QUERY_TIMEOUT_SECONDS = 2.0
READ_CHUNK_SIZE = 200
