"""
Decoding of sensor values returned by the device.

WuT thermometers report readings as display strings in European notation
("21,5"), and "--" for a channel without a connected probe.
"""

import math
import re
from dataclasses import dataclass

# Largest finite IEEE 754 single precision value
FLOAT32_MAX = 3.4028234663852886e38

NO_SENSOR = "--"

# Plain decimal notation with ASCII digits, or inf/infinity/nan
NUMBER = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)


@dataclass(frozen=True)
class Text:
    """A value the agent reported as a character string."""

    text: str


@dataclass(frozen=True)
class Bytes:
    """A value the agent reported as a raw octet string."""

    data: bytes


@dataclass(frozen=True)
class RawLeaf:
    """One walked value and its 0-based position in the response."""

    position: int
    value: Text | Bytes


def leaf_text(value: Text | Bytes) -> str:
    """Printable form of a walked value."""
    if isinstance(value, Bytes):
        return value.data.decode("utf-8", errors="replace")
    return value.text


def parse_value(leaf: RawLeaf) -> float | None:
    """
    Parse a walked value into a temperature.

    Returns None when the channel has no probe or the text is not a
    number representable as a 32-bit float.
    """
    text = leaf_text(leaf.value)
    if NO_SENSOR in text:
        return None

    text = text.strip().replace(",", ".")
    if not NUMBER.fullmatch(text):
        return None

    value = float(text)
    if math.isfinite(value) and abs(value) > FLOAT32_MAX:
        return None
    return value
