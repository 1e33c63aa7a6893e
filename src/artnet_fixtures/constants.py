"""
Central constants for artnet-fixtures
"""

# Art-Net / DMX constants
DMX_UNIVERSE_SIZE = 512
DMX_MAX_SLOT = DMX_UNIVERSE_SIZE - 1
MAX_UNIVERSE = 32767
MAX_VALUE_8BIT = 255
MAX_VALUE_16BIT = 65535
DEFAULT_BITS = 8

# Sender
DEFAULT_HOST = '127.0.0.1'
DEFAULT_REFRESH_INTERVAL_MS = 1000

# Config form limits
MAX_TEMPLATES = 10
MAX_FIXTURES = 100
MAX_PRESETS = 100
FIXTURE_ADDRESS_SPACING = 10

# Config re-apply policies for runtime attribute values
VALUE_POLICY_PRESERVE = 'preserve'
VALUE_POLICY_RESET = 'reset'
VALUE_POLICIES = (VALUE_POLICY_PRESERVE, VALUE_POLICY_RESET)

# Button styles (24-bit RGB)
COLOR_GREEN = 7619328
COLOR_WHITE = 16777215
COLOR_BLACK = 0

# API
DEFAULT_API_PORT = 5000
DEFAULT_API_HOST = '0.0.0.0'
DEFAULT_LOG_DIR = 'logs'
