"""
Errors raised while walking a device.
"""


class WalkError(Exception):
    """A subtree walk failed; no readings are available for the target."""

    def __init__(self, address: str, message: str):
        self.address = address
        super().__init__(f"{address}: {message}")


class AgentUnreachableError(WalkError):
    """The SNMP transport to the agent could not be set up."""


class AgentTimeoutError(WalkError):
    """The agent did not answer within the retry budget."""
