"""Core constants for oichart."""

from enum import Enum


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Command(str, Enum):
    """User commands accepted by the refresh loop."""

    QUIT = "quit"
    REFRESH = "refresh"
    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"
    GROW = "grow"
    SHRINK = "shrink"
    RELAYOUT = "relayout"


# ============================================
# Upstream Schema
# ============================================

MARKET_COLUMNS = (
    "symbol",
    "time",
    "price",
    "vol",
    "open_interest",
    "diff_vol",
    "diff_oi",
    "bid_1",
    "bid_volumn_1",
    "ask_1",
    "ask_volumn_1",
    "datetime",
)
FIELD_COUNT = len(MARKET_COLUMNS)
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CLOCK_FORMAT = "%H:%M:%S"

# ============================================
# Default Values
# ============================================

DEFAULT_BASE_URL = "http://xm.local:8123"
DEFAULT_DATABASE = "feature"
DEFAULT_TABLE = "jm"
DEFAULT_SYMBOL = "jm2509"
DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_WINDOW_SIZE = 200
DEFAULT_STEP = 1
DEFAULT_INTERVAL_SECONDS = 5.0
MIN_WINDOW_POINTS = 2

DEFAULT_WEB_WINDOW_SIZE = 1000
DEFAULT_WEB_STEP = 50
DEFAULT_WEB_INTERVAL_SECONDS = 2.0
DEFAULT_SAMPLE_SIZE = 100
DEFAULT_WEB_PORT = 8080

DEFAULT_ASCII_WIDTH = 100
DEFAULT_ASCII_HEIGHT = 20

# ============================================
# Application Constants
# ============================================

APP_NAME = "oichart"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
