"""Explicit credential holders for the admin console and shop activations.

The admin credential lives for the whole console session (the frontend keeps it
across reloads until logout). A shop activation credential is scoped to one
serial number and may be used for exactly one successful activation.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

DEFAULT_SHOP_SESSION_TTL_SECONDS = 3600.0
DEFAULT_LEDGER_MAX_ENTRIES = 10_000


@dataclass(frozen=True)
class AdminCredential:
    token: str = field(repr=False)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(frozen=True)
class ShopActivationCredential:
    token: str = field(repr=False)
    serial_number: str

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class ShopCredentialLedger:
    """Tracks which shop tokens were issued for which serial, and which are spent.

    Entries expire after ``ttl_seconds`` and the oldest are evicted beyond
    ``max_entries``, so tokens that are never used do not pile up.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_SHOP_SESSION_TTL_SECONDS,
        max_entries: int = DEFAULT_LEDGER_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        # token -> (serial number, issued at); insertion order is issue order
        self._scopes: OrderedDict[str, tuple[str, float]] = OrderedDict()
        # token -> consumed at
        self._consumed: OrderedDict[str, float] = OrderedDict()

    def __len__(self) -> int:
        return len(self._scopes) + len(self._consumed)

    def _expire(self) -> None:
        cutoff = self._clock() - self._ttl_seconds
        while self._scopes and next(iter(self._scopes.values()))[1] <= cutoff:
            self._scopes.popitem(last=False)
        while self._consumed and next(iter(self._consumed.values())) <= cutoff:
            self._consumed.popitem(last=False)
        while len(self._scopes) > self._max_entries:
            self._scopes.popitem(last=False)
        while len(self._consumed) > self._max_entries:
            self._consumed.popitem(last=False)

    def issue(self, token: str, serial_number: str) -> ShopActivationCredential:
        self._scopes.pop(token, None)
        self._scopes[token] = (serial_number, self._clock())
        self._consumed.pop(token, None)
        self._expire()
        return ShopActivationCredential(token=token, serial_number=serial_number)

    def lookup(self, token: str | None, serial_number: str) -> ShopActivationCredential | None:
        """Return the credential if ``token`` is live and scoped to ``serial_number``."""
        self._expire()
        if not token or token in self._consumed:
            return None
        scope = self._scopes.get(token)
        if scope is None or scope[0] != serial_number:
            return None
        return ShopActivationCredential(token=token, serial_number=serial_number)

    def is_consumed(self, token: str) -> bool:
        self._expire()
        return token in self._consumed

    def consume(self, credential: ShopActivationCredential) -> None:
        self._scopes.pop(credential.token, None)
        self._consumed.pop(credential.token, None)
        self._consumed[credential.token] = self._clock()
        self._expire()
