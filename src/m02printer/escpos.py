"""
ESC/POS Command Encoding for the Phomemo M02.

The M02 firmware interprets a small ESC/POS subset. Control codes and
UTF-8 text are interleaved in one flat byte stream, so a job is encoded
by appending commands and text to a builder in print order.

Reference: Epson ESC/POS Application Programming Guide
"""

from dataclasses import dataclass
from enum import IntEnum


ESC = 0x1B


class Alignment(IntEnum):
    """Justification argument for ESC a."""
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class TextStyle(IntEnum):
    """Print mode argument for ESC !."""
    NORMAL = 0x00
    DOUBLE = 0x10  # Double height and width on the M02


# Content types a content source can produce
CONTENT_TYPES = ("poem", "fortune")

DEFAULT_ORNAMENT = "✨"
DEFAULT_FOOTER = "🎉 Enjoy your party! 🎉"

# Blank lines pushed out after the footer so the cut clears the text
FEED_LINES = 4


@dataclass(frozen=True)
class PrintJob:
    """A titled block of text to print.

    Attributes:
        label: Title text, printed upper-cased between ornaments
        body: Text printed under the title
        alignment: Justification of the body
        footer: Closing line printed centered under the body
        ornament: Marker placed on both sides of the title
    """
    label: str
    body: str
    alignment: Alignment = Alignment.CENTER
    footer: str = DEFAULT_FOOTER
    ornament: str = DEFAULT_ORNAMENT

    @property
    def title(self) -> str:
        """Decorated title line."""
        return f"{self.ornament} {self.label.upper()} {self.ornament}"


class ESCPOSCommand:
    """
    ESC/POS command builder.

    Accumulates control codes and text in the order they are added.
    """

    ENCODING = "utf-8"
    # Lone surrogates go through the same codec instead of raising
    ENCODING_ERRORS = "surrogatepass"

    def __init__(self):
        self._commands: list[bytes] = []

    def clear(self):
        """Clear all queued commands."""
        self._commands.clear()

    def get_commands(self) -> bytes:
        """Get all commands as a single byte string."""
        return b"".join(self._commands)

    def _add_raw(self, data: bytes):
        """Add raw bytes."""
        self._commands.append(data)

    # ---- Printer Control ----

    def reset(self):
        """Initialize printer (ESC @)."""
        self._add_raw(bytes([ESC, 0x40]))

    def cut(self):
        """Cut paper (ESC i)."""
        self._add_raw(bytes([ESC, 0x69]))

    # ---- Formatting ----

    def align(self, alignment: Alignment):
        """Set justification (ESC a n)."""
        self._add_raw(bytes([ESC, 0x61, int(alignment)]))

    def style(self, style: TextStyle):
        """Set print mode (ESC ! n)."""
        self._add_raw(bytes([ESC, 0x21, int(style)]))

    # ---- Text ----

    def text(self, value: str):
        """Add literal text."""
        self._add_raw(value.encode(self.ENCODING, self.ENCODING_ERRORS))

    def line(self, value: str = ""):
        """Add text followed by a line feed."""
        self.text(value + "\n")

    def feed_lines(self, count: int):
        """Advance paper by printing empty lines."""
        self.text("\n" * count)


def encode(job: PrintJob) -> bytes:
    """
    Encode a print job into an M02 command stream.

    Layout: reset, centered double-size title, body in the job's
    alignment, centered footer, paper feed, cut.

    Args:
        job: Job to encode

    Returns:
        Complete command stream for the job
    """
    cmd = ESCPOSCommand()
    cmd.reset()
    cmd.align(Alignment.CENTER)
    cmd.style(TextStyle.DOUBLE)
    cmd.line(job.title)
    cmd.style(TextStyle.NORMAL)
    cmd.align(job.alignment)
    cmd.line()
    cmd.text(job.body)
    cmd.line()
    cmd.line()
    cmd.align(Alignment.CENTER)
    cmd.line(job.footer)
    cmd.feed_lines(FEED_LINES)
    cmd.cut()
    return cmd.get_commands()


def content_job(content_type: str, text: str) -> PrintJob:
    """Build a centered job for generated content (poem, fortune, ...)."""
    return PrintJob(label=content_type, body=text)


TEST_PAGE_BANNER = "Thermal Poetry Printer"

TEST_PAGE_TEXT = """🎉 THERMAL POETRY PRINTER 🎉

This is a test print to verify
your printer connection is working!

✨ Features:
• AI-generated poems
• Custom fortunes
• Party-ready content
• Easy printing

Enjoy your party! 🎊"""


def self_test_job() -> PrintJob:
    """Build the built-in self-test page."""
    return PrintJob(
        label=TEST_PAGE_BANNER,
        body=TEST_PAGE_TEXT,
        alignment=Alignment.LEFT,
        footer="Test completed! ✨",
        ornament="🎉",
    )
