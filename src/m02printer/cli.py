"""
Command-Line Interface for the M02 Printer.

Usage:
    m02 scan              - Scan for printers
    m02 print TEXT        - Print a poem or fortune ("-" reads stdin)
    m02 test              - Print the test page
    m02 encode TEXT       - Show the command stream without printing
"""

import asyncio
import dataclasses
import re
import sys
from typing import Optional

import click

from .connection import PrinterInfo
from .errors import PrinterError
from .escpos import CONTENT_TYPES, PrintJob, content_job, encode, self_test_job
from .printer import M02Printer, check_content
from .profiles import DEFAULT_PROFILES


# Bluetooth MAC address format: XX:XX:XX:XX:XX:XX (hex pairs separated by colons)
BLUETOOTH_MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2}$")

# macOS CoreBluetooth UUID format: XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX
MACOS_UUID_PATTERN = re.compile(
    r"^[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}$"
)


def validate_bluetooth_address(ctx, param, value):
    """Validate Bluetooth address format.

    Accepts:
        - MAC address format: XX:XX:XX:XX:XX:XX (Linux/Windows)
        - UUID format: XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX (macOS)

    Returns:
        The validated address (uppercased for consistency)

    Raises:
        click.BadParameter: If the address format is invalid
    """
    if value is None:
        return None
    if BLUETOOTH_MAC_PATTERN.match(value) or MACOS_UUID_PATTERN.match(value):
        return value.upper()
    raise click.BadParameter(
        f"Invalid Bluetooth address format: '{value}'. "
        "Expected MAC format XX:XX:XX:XX:XX:XX or "
        "macOS UUID format XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX"
    )


def prompt_for_printer(candidates: list[PrinterInfo]) -> Optional[PrinterInfo]:
    """Let the user pick one of several printers. None if they abort."""
    click.echo(f"\nFound {len(candidates)} printer(s):\n")
    for i, p in enumerate(candidates, 1):
        click.echo(f"  [{i}] {p}")

    click.echo()
    while True:
        try:
            choice = click.prompt(f"Select printer (1-{len(candidates)})", type=int)
        except click.Abort:
            return None
        if 1 <= choice <= len(candidates):
            return candidates[choice - 1]
        click.echo(f"Please enter a number between 1 and {len(candidates)}", err=True)


def report_error(error: PrinterError):
    """Print a failure with the phase it happened in and exit."""
    phase = error.phase.value.capitalize() if error.phase else "Printer"
    click.echo(f"{phase} error: {error}", err=True)
    sys.exit(1)


def address_option(f):
    return click.option(
        "--address",
        "-a",
        envvar="M02_ADDRESS",
        callback=validate_bluetooth_address,
        help="Printer Bluetooth address (if omitted, scans for any M02)",
    )(f)


def connect_options(f):
    f = click.option(
        "--chunk-size",
        type=click.IntRange(min=1),
        default=None,
        help="Bytes per BLE write (default: profile limit)",
    )(f)
    f = click.option("--timeout", default=10.0, help="Scan timeout in seconds")(f)
    return address_option(f)


def run_job(ctx, job: PrintJob, address, timeout, chunk_size, done_message: str):
    """Connect, print one job, disconnect."""
    profiles = DEFAULT_PROFILES
    if chunk_size is not None:
        profiles = tuple(
            dataclasses.replace(p, max_chunk_bytes=chunk_size) for p in DEFAULT_PROFILES
        )

    async def _run():
        printer = M02Printer()
        printer.set_debug(ctx.obj["debug"])

        click.echo(f"Connecting to {address or 'nearest printer'}...")

        try:
            await printer.connect(
                address, timeout=timeout, chooser=prompt_for_printer, profiles=profiles
            )
            click.echo(f"Connected to {printer.session.device.name}")

            chunks = await printer.print_now(job)
            click.echo(f"{done_message} ({chunks} chunk(s) sent)")

        except PrinterError as e:
            report_error(e)
        finally:
            await printer.disconnect()

    asyncio.run(_run())


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.pass_context
def main(ctx, debug):
    """Phomemo M02 Thermal Printer CLI."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option("--timeout", default=10.0, help="Scan timeout in seconds")
def scan(timeout):
    """Scan for supported printers."""

    async def _scan():
        click.echo(f"Scanning for printers ({timeout}s)...")
        try:
            printers = await M02Printer.scan(timeout=timeout)
        except PrinterError as e:
            report_error(e)

        if not printers:
            click.echo("No printers found.")
            return

        click.echo(f"\nFound {len(printers)} printer(s):\n")
        for p in printers:
            click.echo(f"  {p}")

    asyncio.run(_scan())


@main.command("print")
@click.argument("text")
@click.option(
    "--type",
    "content_type",
    type=click.Choice(CONTENT_TYPES),
    default="poem",
    help="Content type shown in the title (default: poem)",
)
@connect_options
@click.pass_context
def print_text(ctx, text, content_type, address, timeout, chunk_size):
    """Print a poem or fortune.

    TEXT is the content to print; use "-" to read it from stdin.
    """
    if text == "-":
        text = click.get_text_stream("stdin").read().strip()
    job = content_job(content_type, text)
    try:
        check_content(job)
    except PrinterError as e:
        report_error(e)

    run_job(ctx, job, address, timeout, chunk_size,
            "Print complete!")


@main.command()
@connect_options
@click.pass_context
def test(ctx, address, timeout, chunk_size):
    """Print the test page."""
    run_job(ctx, self_test_job(), address, timeout, chunk_size, "Test print complete!")


@main.command("encode")
@click.argument("text", required=False, default="")
@click.option(
    "--type",
    "content_type",
    type=click.Choice(CONTENT_TYPES),
    default="poem",
    help="Content type shown in the title (default: poem)",
)
@click.option("--test-page", is_flag=True, help="Encode the test page instead of TEXT")
def encode_text(text, content_type, test_page):
    """Print the encoded command stream as hex (no printer needed)."""
    if test_page:
        job = self_test_job()
    else:
        if text == "-":
            text = click.get_text_stream("stdin").read().strip()
        job = content_job(content_type, text)
    click.echo(encode(job).hex(" "))


if __name__ == "__main__":
    main()
