"""
Constants and configuration defaults for Kubetrail.

Constants are organized by category:
- Polling intervals: Default pod re-discovery interval
- Logging: Default log level and record format
- Output: Prefix palette used to color pod names
- JSON rendering: Keys probed when pretty-printing structured log lines
- Environment: Variable names read for defaults
"""

# Polling intervals (in seconds)
DEFAULT_REFRESH_INTERVAL_SECONDS = 30
LOG_QUEUE_PUT_POLL_SECONDS = 0.5

# Log streaming
LOG_QUEUE_MAXSIZE = 256  # lines buffered per pod between reader thread and printer

# Logging
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
LOGGER_NAME = "kubetrail"

# Output
POD_COLOR_PALETTE = (
    "bright_cyan",
    "bright_green",
    "bright_magenta",
    "bright_yellow",
    "bright_blue",
    "bright_red",
    "cyan",
    "green",
    "magenta",
    "yellow",
    "blue",
    "orange1",
    "deep_pink2",
    "spring_green2",
    "medium_purple1",
    "gold1",
)

# JSON rendering
JSON_TIMESTAMP_KEYS = ("ts", "timestamp", "time")
JSON_MESSAGE_KEYS = ("msg", "message", "log")
JSON_LEVEL_KEYS = ("level", "lvl", "severity")
JSON_DEFAULT_TIMESTAMP = "no-ts"
JSON_DEFAULT_MESSAGE = "no-msg"
JSON_DEFAULT_LEVEL = "INFO"

# Environment
ENV_LOG_LEVEL = "KUBETRAIL_LOG_LEVEL"
ENV_REFRESH_INTERVAL = "KUBETRAIL_REFRESH_INTERVAL"

# Kubernetes
MAX_NAME_LENGTH = 253
