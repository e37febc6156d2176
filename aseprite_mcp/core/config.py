# config.py
import logging
import os
import sys
import tempfile

logger = logging.getLogger(__name__)

SERVER_NAME = "aseprite-mcp"
SERVER_VERSION = "0.1.0"


def _float_from_env(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be > 0, using %s", name, raw, default)
        return default
    return value


def _int_from_env(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r: must be >= 1, using %s", name, raw, default)
        return default
    return value


# Executable Discovery
# Explicit override; when unset (or missing on disk) the locator probes
# well-known install locations and PATH.
ASEPRITE_PATH = os.getenv("ASEPRITE_PATH") or None

# Output Paths
# Relative paths written by tools are resolved against this directory.
OUTPUT_DIR = os.getenv("ASEPRITE_OUTPUT_DIR") or None

# Process Execution
PROCESS_TIMEOUT_SECONDS = _float_from_env("ASEPRITE_TIMEOUT", 60.0)
TEMP_DIR = os.getenv("ASEPRITE_MCP_TEMP_DIR") or os.path.join(
    tempfile.gettempdir(), "aseprite_mcp"
)
# Granularity of the wait loop that checks for timeout and cancellation
PROCESS_POLL_INTERVAL = 0.1

# Server
MAX_WORKERS = _int_from_env("ASEPRITE_MCP_MAX_WORKERS", 4)

# Logging (stdout carries the protocol stream; logs always go to stderr)
LOG_LEVEL = (os.getenv("ASEPRITE_MCP_LOG_LEVEL") or "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level=None, stream=None):
    """Attach a single stderr handler to the package logger."""
    package_logger = logging.getLogger("aseprite_mcp")
    resolved = level or LOG_LEVEL
    numeric = logging.getLevelName(resolved)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    package_logger.setLevel(numeric)

    for handler in list(package_logger.handlers):
        if getattr(handler, "_aseprite_mcp_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._aseprite_mcp_handler = True
    package_logger.addHandler(handler)
    package_logger.propagate = False
    return package_logger


def resolve_output_path(path):
    """Resolve a path the tools will write to against OUTPUT_DIR.

    Absolute paths, and every path when no output directory is configured,
    are returned unchanged.
    """
    if not OUTPUT_DIR or os.path.isabs(path):
        return path
    if not os.path.isdir(OUTPUT_DIR):
        logger.info("Creating output directory: %s", OUTPUT_DIR)
        os.makedirs(OUTPUT_DIR, exist_ok=True)
    return os.path.join(OUTPUT_DIR, path)
