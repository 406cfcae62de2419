"""Constant definitions for linkfetch."""

# Pending media cache
MAX_PENDING_MEDIA = 100

# Media group buffering
MEDIA_GROUP_DELAY_SECONDS = 0.5
MEDIA_GROUP_SEND_LIMIT = 10

# Telegram Bot API download ceiling
MAX_TELEGRAM_FILE_SIZE = 20 * 1024 * 1024

# Extraction
DEFAULT_PARSE_TIMEOUT_SECONDS = 60
MAX_ALTERNATE_FORMATS = 5
TITLE_PREVIEW_LENGTH = 50

# Remote download daemon (aria2) performance defaults
ARIA2_MAX_CONNECTIONS_PER_SERVER = 16
ARIA2_SPLIT = 16
ARIA2_MIN_SPLIT_SIZE = "1M"

# Filenames sent to the download daemon
SINGLE_FILENAME_LIMIT = 100
BATCH_FILENAME_LIMIT = 80

# Setup answers meaning "no value"
NONE_ANSWERS = frozenset({"", "none", "无"})
