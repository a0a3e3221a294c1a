"""
Pytest configuration for M02 printer tests.

Provides fixtures and command-line options for hardware tests, plus an
in-memory stand-in for the BLE connection used by the session tests.
"""

import dataclasses

import pytest
import pytest_asyncio

from m02printer import M02Printer
from m02printer.connection import PrinterInfo
from m02printer.errors import NotConnectedError, Phase, TransmitFailedError
from m02printer.profiles import PHOMEMO_M02


def pytest_addoption(parser):
    """Add command-line options for hardware tests."""
    parser.addoption(
        "--address",
        action="store",
        default=None,
        help="Bluetooth address of the printer for hardware tests",
    )


class FakeConnection:
    """Records writes the way BLEConnection would perform them.

    Attributes:
        printers: Result returned by scan()
        fail_at: 1-based write number that raises TransmitFailedError
        drop_at: 1-based write number after which the link is lost
        mtu_payload: Value reported as max_write_size once connected
    """

    def __init__(self, printers=None, fail_at=None, drop_at=None, mtu_payload=None):
        self.printers = printers if printers is not None else []
        self.fail_at = fail_at
        self.drop_at = drop_at
        self.mtu_payload = mtu_payload
        self.connect_error = None
        self.scan_error = None
        self.connected = False
        self.writes: list[bytes] = []
        self.scan_calls = []
        self.disconnect_calls = 0
        self.on_link_lost = None
        self._in_flight = 0
        self.max_in_flight = 0

    async def scan(self, profiles, timeout=10.0, address=None):
        self.scan_calls.append((tuple(profiles), timeout, address))
        if self.scan_error:
            raise self.scan_error
        found = []
        for printer in self.printers:
            if address is not None and printer.address != address:
                continue
            # Tag with the first matching profile, as BLEConnection.scan does
            profile = next((p for p in profiles if p.matches(printer.name)), None)
            if profile is not None:
                found.append(dataclasses.replace(printer, profile=profile))
        return found

    async def connect(self, printer, on_link_lost=None):
        if self.connect_error:
            raise self.connect_error
        self.on_link_lost = on_link_lost
        self.connected = True

    async def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False
        return []

    async def write(self, data):
        if not self.connected:
            raise NotConnectedError("Not connected to printer", phase=Phase.SEND)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            number = len(self.writes) + 1
            if number == self.fail_at:
                raise TransmitFailedError("Write failed: GATT error", phase=Phase.SEND)
            self.writes.append(bytes(data))
            if number == self.drop_at:
                self.lose_link()
        finally:
            self._in_flight -= 1

    def lose_link(self):
        self.connected = False
        if self.on_link_lost:
            self.on_link_lost()

    @property
    def max_write_size(self):
        return self.mtu_payload if self.connected else None

    @property
    def is_connected(self):
        return self.connected


def make_printer_info(name="M02-1A2B", address="AA:BB:CC:DD:EE:FF", rssi=-50,
                      profile=PHOMEMO_M02):
    return PrinterInfo(name=name, address=address, rssi=rssi, profile=profile)


@pytest.fixture
def printer_info():
    return make_printer_info()


@pytest.fixture
def fake_connection(printer_info):
    return FakeConnection(printers=[printer_info])


@pytest.fixture
def printer_address(request):
    """Get the printer address from command line."""
    address = request.config.getoption("--address")
    if address is None:
        pytest.skip("No printer address provided (use --address=XX:XX:XX:XX:XX:XX)")
    return address


@pytest_asyncio.fixture
async def connected_printer(printer_address):
    """Provide a connected printer instance."""
    printer = M02Printer()
    printer.set_debug(True)

    await printer.connect(printer_address)

    yield printer

    await printer.disconnect()
