"""
BLE Connection Handler for the M02 printer.

Handles Bluetooth Low Energy discovery and writes using the Bleak library.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.exc import BleakError

from .errors import (
    ConnectionFailedError,
    NotConnectedError,
    NotSupportedError,
    Phase,
    TransmitFailedError,
)
from .profiles import PrinterProfile


@dataclass
class PrinterInfo:
    """Information about a discovered printer.

    Attributes:
        name: Device advertised name (e.g., "M02-1A2B")
        address: Platform-specific identifier for connecting:
            - MAC address (XX:XX:XX:XX:XX:XX) on Linux/Windows
            - UUID on macOS (CoreBluetooth privacy feature)
        rssi: Signal strength in dB
        profile: Printer family the advertisement matched
        ble_device: Bleak device handle from the scan, when available
    """
    name: str
    address: str
    rssi: int
    profile: PrinterProfile
    ble_device: Optional[BLEDevice] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"{self.name} [{self.address}] RSSI: {self.rssi} dB ({self.profile})"


class BLEConnection:
    """Manages the BLE link to one printer."""

    # Seconds to wait for the GATT connection and service discovery
    CONNECT_TIMEOUT = 10.0

    # ATT header bytes taken out of every MTU-sized packet
    ATT_OVERHEAD = 3

    def __init__(self):
        self.client: Optional[BleakClient] = None
        self.printer: Optional[PrinterInfo] = None
        self.write_char: Optional[BleakGATTCharacteristic] = None
        self._closing = False
        self._link_lost_callback: Optional[Callable[[], None]] = None

    @classmethod
    async def scan(
        cls,
        profiles: Sequence[PrinterProfile],
        timeout: float = 10.0,
        address: Optional[str] = None,
    ) -> list[PrinterInfo]:
        """Scan for printers matching any of the given profiles.

        Each device is tagged with the first profile it matches. Results
        are ordered by profile order, then strongest signal first.

        Raises:
            NotSupportedError: If the host has no usable Bluetooth adapter
        """
        try:
            devices = await BleakScanner.discover(timeout=timeout, return_adv=True)
        except (BleakError, OSError) as e:
            raise NotSupportedError(
                f"Bluetooth LE is not available: {e}", phase=Phase.DISCOVERY
            ) from e

        printers = []
        for device, adv_data in devices.values():
            if address and device.address.upper() != address.upper():
                continue
            name = device.name or adv_data.local_name or ""
            service_uuids = adv_data.service_uuids or []
            for profile in profiles:
                if profile.matches(name, service_uuids):
                    printers.append(PrinterInfo(
                        name=name,
                        address=device.address,
                        rssi=adv_data.rssi if adv_data.rssi is not None else -100,
                        profile=profile,
                        ble_device=device,
                    ))
                    break

        rank = {profile: i for i, profile in enumerate(profiles)}
        return sorted(printers, key=lambda p: (rank[p.profile], -p.rssi))

    async def connect(
        self,
        printer: PrinterInfo,
        on_link_lost: Optional[Callable[[], None]] = None,
    ):
        """Open the GATT link and locate the profile's write characteristic.

        Args:
            printer: Printer returned by scan()
            on_link_lost: Called when the printer drops the link on its own

        Raises:
            ConnectionFailedError: If the link or the characteristic is unavailable
        """
        self._link_lost_callback = on_link_lost
        self._closing = False
        self.client = BleakClient(
            printer.ble_device or printer.address,
            disconnected_callback=self._handle_disconnect,
            timeout=self.CONNECT_TIMEOUT,
        )

        profile = printer.profile
        try:
            await self.client.connect()
            service = self.client.services.get_service(profile.service_uuid)
        except (BleakError, OSError, asyncio.TimeoutError) as e:
            await self.disconnect()
            raise ConnectionFailedError(
                f"Failed to connect to {printer.address}: {e}", phase=Phase.CONNECT
            ) from e
        except asyncio.CancelledError:
            await self.disconnect()
            raise

        if service is None:
            await self.disconnect()
            raise ConnectionFailedError(
                f"{printer.name} has no service {profile.service_uuid}",
                phase=Phase.CONNECT,
            )

        char = service.get_characteristic(profile.characteristic_uuid)
        if char is None:
            await self.disconnect()
            raise ConnectionFailedError(
                f"{printer.name} has no characteristic "
                f"{profile.characteristic_uuid} in service {profile.service_uuid}",
                phase=Phase.CONNECT,
            )

        self.printer = printer
        # Keep the characteristic object: the same UUID may exist in other services
        self.write_char = char

    async def disconnect(self) -> list[Exception]:
        """Close the link. Safe to call when nothing is open.

        Returns:
            Errors raised by the stack while tearing down, for logging
        """
        errors: list[Exception] = []
        self._closing = True
        client = self.client
        self.client = None
        self.printer = None
        self.write_char = None

        if client is not None and client.is_connected:
            try:
                await client.disconnect()
            except (BleakError, OSError, asyncio.TimeoutError) as e:
                errors.append(e)
        return errors

    def _handle_disconnect(self, client: BleakClient):
        """Bleak callback for link teardown."""
        if self._closing:
            return
        if self._link_lost_callback:
            self._link_lost_callback()

    async def write(self, data: bytes):
        """Write one chunk and wait for the printer's acknowledgment.

        Raises:
            NotConnectedError: If no link is open
            TransmitFailedError: If the write is rejected or times out
        """
        if not self.client or not self.write_char:
            raise NotConnectedError("Not connected to printer", phase=Phase.SEND)

        try:
            await self.client.write_gatt_char(self.write_char, data, response=True)
        except (BleakError, OSError, asyncio.TimeoutError) as e:
            raise TransmitFailedError(f"Write failed: {e}", phase=Phase.SEND) from e

    @property
    def max_write_size(self) -> Optional[int]:
        """Largest payload a single write can carry on this link."""
        if not self.client:
            return None
        # Bleak reports the ATT MTU; 23 is the unnegotiated minimum
        mtu = getattr(self.client, "mtu_size", None)
        if not mtu:
            return None
        return mtu - self.ATT_OVERHEAD

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self.client is not None and self.client.is_connected
