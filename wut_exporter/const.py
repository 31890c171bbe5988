"""
Application constants and metadata.
"""

# Application info
APP_NAME = "WuT Temperature Exporter"
APP_VERSION = "0.1.0"

# Configuration search path (first existing file wins)
CONFIG_SEARCH_PATHS = (
    "/etc/wut-temperature-exporter/config.conf",
    "config.conf",
)

# Exposed metric
METRIC_NAME = "wut_temperature"
METRIC_DOCUMENTATION = "Temperature reading from WUT sensor"
METRIC_LABELS = ("room", "sensor")

# SNMP defaults
DEFAULT_SNMP_PORT = 161
DEFAULT_SNMP_TIMEOUT = 30.0
DEFAULT_SNMP_RETRIES = 3
DEFAULT_MAX_REPETITIONS = 50
SENSOR_VALUES_OID = "1.3.6.1.4.1.5040.1.2.6.1.3.1.1"

# HTTP defaults
DEFAULT_LISTEN = "0.0.0.0"
DEFAULT_HTTP_PORT = 9191
DEFAULT_SHUTDOWN_GRACE = 5.0
