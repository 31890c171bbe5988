"""
WuT Temperature Exporter.

Polls WuT thermometer devices over SNMP and exposes their readings
for Prometheus.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
