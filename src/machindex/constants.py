"""Constants for machindex."""

# Index file layout
INDEX_FILE = "index"
INDEX_VERSION = 1
LOCK_SUFFIX = ".lock"
CONFIG_FILE = "config.toml"

# Default data directory when none is given on the command line
DEFAULT_DATA_DIR = "~/.machindex/data"
DATA_DIR_ENV = "MACHINDEX_DATA_DIR"

# Stamp format for updated_at, e.g. "2014-03-02 11:11:44 +0100"
UPDATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S %z"
