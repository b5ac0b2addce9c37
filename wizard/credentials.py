"""Credential gate for data sources that require an API key.

LOCKED/FAILED -> VERIFYING -> CONNECTED | FAILED. CONNECTED is terminal for
the session. Each submit bumps a generation token; a verification that
resolves after cancel() or a newer submit is discarded.
"""

import asyncio
import logging
from enum import Enum
from typing import Protocol

import httpx

from wizard.catalog import DataSourceId
from wizard.errors import CredentialError

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    LOCKED = "locked"
    VERIFYING = "verifying"
    CONNECTED = "connected"
    FAILED = "failed"


class CredentialVerifier(Protocol):
    async def verify(self, source: DataSourceId, credential: str) -> tuple[bool, str]:
        """Returns (success, message)."""
        ...


class SimulatedCredentialVerifier:
    """Fixed-latency round trip that accepts any non-empty credential."""

    def __init__(self, latency: float = 1.5) -> None:
        self._latency = latency

    async def verify(self, source: DataSourceId, credential: str) -> tuple[bool, str]:
        await asyncio.sleep(self._latency)
        return True, "connected"


class HttpCredentialVerifier:
    """Probe the provider API with the key in the x-api-key header."""

    def __init__(self, probe_url: str, timeout: float = 10.0) -> None:
        self._probe_url = probe_url
        self._timeout = timeout

    async def verify(self, source: DataSourceId, credential: str) -> tuple[bool, str]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(self._probe_url, headers={"x-api-key": credential})
                if resp.status_code in (401, 403):
                    return False, "Invalid API key"
                if resp.status_code >= 400:
                    return False, f"HTTP {resp.status_code}"
                return True, "connected"
        except httpx.TimeoutException:
            return False, "Connection timeout"
        except httpx.HTTPError as e:
            logger.debug("Probe of %s failed: %s", source.value, e)
            return False, str(e)


class CredentialGate:
    """Connection state for one credential-requiring data source."""

    def __init__(self, source: DataSourceId, verifier: CredentialVerifier) -> None:
        self.source = source
        self._verifier = verifier
        self._state = GateState.LOCKED
        self._error: str | None = None
        self._generation = 0

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def error(self) -> str | None:
        """Message of the last failed attempt; cleared on success."""
        return self._error

    @property
    def is_connected(self) -> bool:
        return self._state is GateState.CONNECTED

    def begin(self, credential: str) -> int:
        """Validate credential and enter VERIFYING. Returns the generation token.

        Raises CredentialError for an empty credential or a verification
        already in flight; state is unchanged in both cases.
        """
        if self._state is GateState.VERIFYING:
            raise CredentialError("Verification already in progress")
        if not credential or not credential.strip():
            raise CredentialError("API key is required")
        self._generation += 1
        self._state = GateState.VERIFYING
        logger.info("Verifying credential for %s", self.source.value)
        return self._generation

    def resolve(self, token: int, ok: bool, message: str) -> bool:
        """Apply a verification result. Returns False if the token is stale."""
        if token != self._generation or self._state is not GateState.VERIFYING:
            logger.warning(
                "Discarding stale verification for %s (token %d)", self.source.value, token
            )
            return False
        if ok:
            self._state = GateState.CONNECTED
            self._error = None
            logger.info("%s connected", self.source.value)
        else:
            self._state = GateState.FAILED
            self._error = message or "Verification failed"
            logger.warning("%s verification failed: %s", self.source.value, self._error)
        return True

    def cancel(self) -> None:
        """Abandon an in-flight verification."""
        if self._state is not GateState.VERIFYING:
            return
        self._generation += 1
        self._state = GateState.FAILED if self._error else GateState.LOCKED
        logger.debug("Verification for %s cancelled", self.source.value)

    async def submit(self, credential: str) -> bool:
        """Verify credential. Returns True when this call connected the gate.

        A CONNECTED gate ignores further submits and returns False.
        """
        if self.is_connected:
            return False
        token = self.begin(credential)
        try:
            ok, message = await self._verifier.verify(self.source, credential.strip())
        except Exception as e:
            logger.warning("Verifier for %s raised: %s", self.source.value, e)
            ok, message = False, str(e)
        applied = self.resolve(token, ok, message)
        if applied and not ok:
            raise CredentialError(self._error or "Verification failed")
        return applied and ok
