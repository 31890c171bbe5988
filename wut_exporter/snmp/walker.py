"""
SNMP subtree walker built on pysnmp's asyncio high-level API.

One SNMPWalker polls one device. A walk is a sequence of GETNEXT (SNMPv1)
or GETBULK (SNMPv2c) round trips; every round trip is retried on timeout
and each retry is reported to an optional observer.
"""

from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    bulk_cmd,
    next_cmd,
)
from pysnmp.proto import errind
from pysnmp.proto.rfc1902 import ObjectName, OctetString
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from ..config.schema import SNMPConfig, SNMPVersion
from ..logging import get_logger
from .errors import AgentTimeoutError, AgentUnreachableError, WalkError
from .values import Bytes, RawLeaf, Text


logger = get_logger("snmp.walker")

# SNMPv1 signals the end of the MIB view with this error status
NO_SUCH_NAME = 2

END_OF_VIEW = (EndOfMibView, NoSuchObject, NoSuchInstance)

RetryObserver = Callable[[str, int], None]


@dataclass
class _Session:
    """Per-walk pysnmp objects."""

    engine: Any
    auth: CommunityData
    transport: Any
    context: ContextData


def wire_value(value: Any) -> Text | Bytes:
    """Tag an SNMP value as raw octets or text."""
    if isinstance(value, OctetString):
        return Bytes(value.asOctets())
    return Text(value.prettyPrint())


class SNMPWalker:
    """
    Walks an OID subtree on a single agent.

    Usage:
        walker = SNMPWalker("10.0.0.5", "public", settings, on_retry=log_retry)
        leaves = await walker.walk("1.3.6.1.4.1.5040.1.2.6.1.3.1.1")
    """

    def __init__(
        self,
        address: str,
        community: str,
        settings: SNMPConfig | None = None,
        on_retry: RetryObserver | None = None,
    ):
        self.address = address
        self.community = community
        self.settings = settings or SNMPConfig()
        self.on_retry = on_retry

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[_Session]:
        """Open the SNMP engine and UDP transport; always closed on exit."""
        engine = SnmpEngine()
        try:
            try:
                transport = await UdpTransportTarget.create(
                    (self.address, self.settings.port),
                    timeout=self.settings.timeout,
                    retries=0,
                )
            except (PySnmpError, OSError) as e:
                raise AgentUnreachableError(self.address, f"cannot open transport: {e}") from e

            yield _Session(
                engine=engine,
                auth=CommunityData(self.community, mpModel=self.settings.version.mp_model),
                transport=transport,
                context=ContextData(),
            )
        finally:
            engine.close_dispatcher()

    async def walk(self, root_oid: str) -> list[RawLeaf]:
        """
        Fetch every value below root_oid, in agent order.

        Raises:
            AgentUnreachableError: The transport could not be set up
            AgentTimeoutError: A round trip timed out on every attempt
            WalkError: The agent answered with an error
        """
        root = ObjectName(root_oid)
        leaves: list[RawLeaf] = []

        async with self._session() as session:
            current = root
            done = False

            while not done:
                var_binds = await self._request(session, current)
                done = not var_binds

                for var_bind in var_binds:
                    name, value = var_bind[0], var_bind[1]
                    if isinstance(value, END_OF_VIEW) or not root.isPrefixOf(name):
                        done = True
                        break
                    if name <= current:
                        raise WalkError(self.address, f"OID not increasing: {name}")

                    leaves.append(RawLeaf(position=len(leaves), value=wire_value(value)))
                    current = name

        logger.debug(f"Walked {len(leaves)} values from {self.address}")
        return leaves

    async def _request(self, session: _Session, oid: ObjectName) -> Sequence[Any]:
        """One round trip, retried on timeout."""
        attempts = self.settings.retries + 1

        for attempt in range(attempts):
            if attempt and self.on_retry is not None:
                self.on_retry(self.address, attempt)

            error_indication, error_status, error_index, var_binds = await self._send(session, oid)

            if isinstance(error_indication, errind.RequestTimedOut):
                continue
            if error_indication:
                raise WalkError(self.address, str(error_indication))
            if error_status:
                if self.settings.version is SNMPVersion.V1 and int(error_status) == NO_SUCH_NAME:
                    return []
                raise WalkError(
                    self.address,
                    f"agent returned error status {int(error_status)} at index {int(error_index)}",
                )
            return var_binds

        raise AgentTimeoutError(self.address, f"no response after {attempts} attempts")

    async def _send(self, session: _Session, oid: ObjectName) -> tuple[Any, Any, Any, Sequence[Any]]:
        var_bind = ObjectType(ObjectIdentity(oid))
        try:
            if self.settings.version is SNMPVersion.V1:
                return await next_cmd(
                    session.engine,
                    session.auth,
                    session.transport,
                    session.context,
                    var_bind,
                    lookupMib=False,
                )
            return await bulk_cmd(
                session.engine,
                session.auth,
                session.transport,
                session.context,
                0,
                self.settings.max_repetitions,
                var_bind,
                lookupMib=False,
            )
        except (PySnmpError, OSError) as e:
            raise AgentUnreachableError(self.address, str(e)) from e
