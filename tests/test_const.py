"""
Tests for constants.
"""

from wut_exporter import __version__
from wut_exporter.const import APP_NAME, APP_VERSION, METRIC_LABELS, METRIC_NAME, SENSOR_VALUES_OID


def test_constants():
    """Test that constants are defined."""
    assert APP_NAME == "WuT Temperature Exporter"
    assert __version__ == APP_VERSION
    assert METRIC_NAME == "wut_temperature"
    assert METRIC_LABELS == ("room", "sensor")
    assert SENSOR_VALUES_OID == "1.3.6.1.4.1.5040.1.2.6.1.3.1.1"
