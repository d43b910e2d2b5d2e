"""Security registry.

The generator only reads the registry: it looks securities up by symbol and
returns the generated bars. Applying those bars as market prices is left to
the caller through :meth:`SecurityManager.update_prices`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol

from synthfeed.types import MutableModel, Slice, Symbol, SyntheticBar


class Security(MutableModel):
    """A tradable instrument with its last known price.

    :param symbol: Market symbol.
    :param price: Last known price, or None before any bar was applied.
    :param last_bar: Last bar applied to this security.
    """

    symbol: Symbol
    price: float | None = None
    last_bar: SyntheticBar | None = None

    def set_market_price(self, bar: SyntheticBar) -> None:
        """Record ``bar`` as the latest market data for this security."""
        self.price = bar.close
        self.last_bar = bar


class SecurityRegistry(Protocol):
    """Lookup interface the bar assembler depends on."""

    def try_get(self, symbol: str) -> Security | None:
        """Return the security for ``symbol`` or None if it is not registered."""
        ...


class SecurityManager:
    """In-memory registry of securities keyed by symbol.

    :param symbols: Symbols to register up front.
    """

    def __init__(self, symbols: Iterable[str] | None = None) -> None:
        self._securities: dict[str, Security] = {}
        for symbol in symbols or []:
            self.add(symbol)

    def add(self, symbol: str) -> Security:
        """Register ``symbol``, returning the existing security if present."""
        key = str(symbol)
        security = self._securities.get(key)
        if security is None:
            security = Security(symbol=Symbol(key))
            self._securities[key] = security
        return security

    def try_get(self, symbol: str) -> Security | None:
        return self._securities.get(str(symbol))

    def symbols(self) -> list[Symbol]:
        """Registered symbols in registration order."""
        return [security.symbol for security in self._securities.values()]

    def update_prices(self, time_slice: Slice) -> int:
        """Apply the latest bar of every packet in ``time_slice``.

        Packets for symbols that are no longer registered are ignored.

        :param time_slice: Slice produced by the generator.
        :returns: Number of securities updated.
        """
        updated = 0
        for packet in time_slice.packets:
            security = self.try_get(packet.symbol)
            if security is None or not packet.data:
                continue
            security.set_market_price(packet.data[-1])
            updated += 1
        return updated

    def __contains__(self, symbol: object) -> bool:
        return str(symbol) in self._securities

    def __len__(self) -> int:
        return len(self._securities)

    def __iter__(self) -> Iterator[Security]:
        return iter(self._securities.values())


__all__ = ["Security", "SecurityRegistry", "SecurityManager"]
