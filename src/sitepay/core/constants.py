"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
WORKER_SUMMARY_RECENT_LIMIT = 100

MAX_REQUEST_ID_LENGTH = 100
MAX_COMMENTS_LENGTH = 1000

MIN_RATING = 1
MAX_RATING = 5
