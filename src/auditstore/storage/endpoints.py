"""
Walrus endpoint registry.

Publishers accept writes, aggregators serve reads. Both lists are ordered
by preference: consumers try index 0 first and fail over strictly in order.
The registry is immutable once built.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from auditstore.utils.validation import validate_endpoint_url


# Walrus testnet publishers, in preference order
TESTNET_PUBLISHERS: Tuple[str, ...] = (
    "https://publisher.walrus-testnet.walrus.space",
    "https://wal-publisher-testnet.staketab.org",
    "https://walrus-testnet-publisher.redundex.com",
    "https://walrus-testnet-publisher.nodes.guru",
    "https://walrus-testnet-publisher.stakin-nodes.com",
)

# Walrus testnet aggregators, in preference order
TESTNET_AGGREGATORS: Tuple[str, ...] = (
    "https://aggregator.walrus-testnet.walrus.space",
    "https://wal-aggregator-testnet.staketab.org",
    "https://walrus-testnet-aggregator.redundex.com",
    "https://walrus-testnet.blockscope.net",
)


class EndpointRegistry:
    """
    Ordered, read-only lists of write and read endpoints.

    Example:
        ```python
        registry = EndpointRegistry.testnet()
        for publisher in registry.write_endpoints():
            ...
        ```
    """

    __slots__ = ("_write", "_read")

    def __init__(
        self,
        write_endpoints: Iterable[str],
        read_endpoints: Iterable[str],
    ) -> None:
        """
        Initialize the registry.

        Args:
            write_endpoints: Publisher base URLs, most preferred first
            read_endpoints: Aggregator base URLs, most preferred first

        Raises:
            ValueError: If a list is empty or holds an invalid URL
        """
        write = tuple(validate_endpoint_url(u, "write endpoint") for u in write_endpoints)
        read = tuple(validate_endpoint_url(u, "read endpoint") for u in read_endpoints)
        if not write:
            raise ValueError("at least one write endpoint is required")
        if not read:
            raise ValueError("at least one read endpoint is required")
        object.__setattr__(self, "_write", write)
        object.__setattr__(self, "_read", read)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("EndpointRegistry is immutable")

    @classmethod
    def testnet(cls) -> "EndpointRegistry":
        """Registry of the public Walrus testnet endpoints."""
        return cls(TESTNET_PUBLISHERS, TESTNET_AGGREGATORS)

    def write_endpoints(self) -> Tuple[str, ...]:
        """Publishers in the order they must be tried."""
        return self._write

    def read_endpoints(self) -> Tuple[str, ...]:
        """Aggregators in the order they must be tried."""
        return self._read

    def primary_write_endpoint(self) -> str:
        """Most preferred publisher."""
        return self._write[0]

    def __repr__(self) -> str:
        return (
            f"EndpointRegistry(write_endpoints={list(self._write)!r}, "
            f"read_endpoints={list(self._read)!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EndpointRegistry):
            return NotImplemented
        return self._write == other._write and self._read == other._read

    def __hash__(self) -> int:
        return hash((self._write, self._read))
