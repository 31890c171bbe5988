"""
SNMP polling of WuT thermometers.
"""

from .errors import AgentTimeoutError, AgentUnreachableError, WalkError
from .values import Bytes, RawLeaf, Text, parse_value
from .walker import SNMPWalker

__all__ = [
    "AgentTimeoutError",
    "AgentUnreachableError",
    "Bytes",
    "RawLeaf",
    "SNMPWalker",
    "Text",
    "WalkError",
    "parse_value",
]
