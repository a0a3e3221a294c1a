"""
Printer family descriptors.

A profile tells discovery which advertisements belong to a supported
printer and tells the session which GATT characteristic accepts the
command stream and how many bytes it takes per write.
"""

from dataclasses import dataclass
from typing import Iterable

from .errors import InvalidConfigurationError


@dataclass(frozen=True)
class PrinterProfile:
    """Capabilities of one supported printer family.

    Attributes:
        name: Human readable family name (e.g., "Phomemo M02")
        service_uuid: Primary GATT service that carries print data
        characteristic_uuid: Writable characteristic inside that service
        name_prefixes: Advertised name prefixes that identify the family
        max_chunk_bytes: Largest payload accepted in a single write
    """
    name: str
    service_uuid: str
    characteristic_uuid: str
    name_prefixes: frozenset[str]
    max_chunk_bytes: int

    def __post_init__(self):
        if self.max_chunk_bytes < 1:
            raise InvalidConfigurationError(
                f"max_chunk_bytes must be >= 1, got {self.max_chunk_bytes}"
            )
        # Accept any iterable of prefixes but store it immutably
        object.__setattr__(self, "name_prefixes", frozenset(self.name_prefixes))

    def matches(self, name: str, service_uuids: Iterable[str] = ()) -> bool:
        """Check whether an advertisement belongs to this family."""
        if self.service_uuid.lower() in (uuid.lower() for uuid in service_uuids):
            return True
        return any(name.startswith(prefix) for prefix in self.name_prefixes)

    def __str__(self) -> str:
        return self.name


# Phomemo M02 and its rebadges expose an ESC/POS pipe on the 18f0 service.
# 100 bytes fits comfortably under the MTU most hosts negotiate; the session
# lowers it further when the link reports a smaller MTU.
PHOMEMO_M02 = PrinterProfile(
    name="Phomemo M02",
    service_uuid="000018f0-0000-1000-8000-00805f9b34fb",
    characteristic_uuid="00002af1-0000-1000-8000-00805f9b34fb",
    name_prefixes=frozenset({"Phomemo", "M02"}),
    max_chunk_bytes=100,
)

DEFAULT_PROFILES = (PHOMEMO_M02,)
