"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ALL_DISTRICTS = "__all__"

READ_CHUNK_SIZE = 200
DEFAULT_QUERY_TIMEOUT_SECONDS = 10.0

DATE_LABEL_FORMAT = "%Y/%m/%d"
EMPTY_PERIOD_LABEL = "-"
