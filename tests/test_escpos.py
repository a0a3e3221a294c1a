"""Tests for ESC/POS command encoding."""

from m02printer.escpos import (
    Alignment,
    ESCPOSCommand,
    PrintJob,
    TextStyle,
    content_job,
    encode,
    self_test_job,
)


RESET = bytes([0x1B, 0x40])
CENTER = bytes([0x1B, 0x61, 0x01])
LEFT = bytes([0x1B, 0x61, 0x00])
DOUBLE = bytes([0x1B, 0x21, 0x10])
NORMAL = bytes([0x1B, 0x21, 0x00])
CUT = bytes([0x1B, 0x69])


class TestESCPOSCommand:
    """Test individual command builders."""

    def test_reset(self):
        cmd = ESCPOSCommand()
        cmd.reset()
        assert cmd.get_commands() == RESET

    def test_cut(self):
        cmd = ESCPOSCommand()
        cmd.cut()
        assert cmd.get_commands() == CUT

    def test_align(self):
        cmd = ESCPOSCommand()
        cmd.align(Alignment.CENTER)
        cmd.align(Alignment.LEFT)
        cmd.align(Alignment.RIGHT)
        assert cmd.get_commands() == CENTER + LEFT + bytes([0x1B, 0x61, 0x02])

    def test_style(self):
        cmd = ESCPOSCommand()
        cmd.style(TextStyle.DOUBLE)
        cmd.style(TextStyle.NORMAL)
        assert cmd.get_commands() == DOUBLE + NORMAL

    def test_line_appends_newline(self):
        cmd = ESCPOSCommand()
        cmd.line("hi")
        cmd.line()
        assert cmd.get_commands() == b"hi\n\n"

    def test_text_is_utf8(self):
        cmd = ESCPOSCommand()
        cmd.text("café ✨")
        assert cmd.get_commands() == "café ✨".encode("utf-8")

    def test_feed_lines(self):
        cmd = ESCPOSCommand()
        cmd.feed_lines(4)
        assert cmd.get_commands() == b"\n\n\n\n"

    def test_clear(self):
        cmd = ESCPOSCommand()
        cmd.reset()
        cmd.clear()
        assert cmd.get_commands() == b""


class TestEncode:
    """Test full job encoding."""

    def test_poem_layout(self):
        """A content job encodes to the exact expected byte sequence."""
        stream = encode(PrintJob(label="poem", body="Roses are red"))

        expected = (
            RESET + CENTER + DOUBLE
            + "✨ POEM ✨\n".encode("utf-8")
            + NORMAL + CENTER
            + b"\nRoses are red\n\n"
            + CENTER + "🎉 Enjoy your party! 🎉\n".encode("utf-8")
            + b"\n\n\n\n"
            + CUT
        )
        assert stream == expected

    def test_stream_prefix_and_suffix(self):
        stream = encode(PrintJob(label="poem", body="Roses are red"))

        assert stream.startswith(bytes([0x1B, 0x40, 0x1B, 0x61, 0x01, 0x1B, 0x21, 0x10]))
        assert stream.endswith(CUT)
        title_at = stream.find("POEM".encode("utf-8"))
        body_at = stream.find(b"Roses are red")
        assert 0 < title_at < body_at

    def test_deterministic(self):
        job = PrintJob(label="fortune", body="You will find a lost sock.")
        assert encode(job) == encode(job)
        assert encode(job) == encode(PrintJob(label="fortune", body="You will find a lost sock."))

    def test_body_alignment_follows_job(self):
        stream = encode(PrintJob(label="note", body="x", alignment=Alignment.LEFT))
        # Title is always centered, body alignment comes after normal style
        assert NORMAL + LEFT in stream
        assert stream.startswith(RESET + CENTER + DOUBLE)

    def test_empty_body_still_encodes(self):
        stream = encode(PrintJob(label="poem", body=""))
        assert stream.startswith(RESET)
        assert stream.endswith(CUT)

    def test_multiline_body(self):
        body = "line one\nline two\n\nline four"
        stream = encode(PrintJob(label="poem", body=body))
        assert body.encode("utf-8") in stream

    def test_non_ascii_body(self):
        body = "Liebe Grüße 💕 日本語"
        stream = encode(PrintJob(label="poem", body=body))
        assert body.encode("utf-8") in stream

    def test_lone_surrogate_does_not_raise(self):
        body = "broken \ud800 text"
        stream = encode(PrintJob(label="poem", body=body))
        assert body.encode("utf-8", "surrogatepass") in stream

    def test_custom_footer_and_ornament(self):
        job = PrintJob(label="menu", body="Tacos", footer="Bon appetit", ornament="*")
        stream = encode(job)
        assert b"* MENU *\n" in stream
        assert CENTER + b"Bon appetit\n" in stream
        assert "🎉".encode("utf-8") not in stream


class TestJobFactories:
    """Test the built-in job variants."""

    def test_content_job(self):
        job = content_job("fortune", "Good things are coming.")
        assert job.label == "fortune"
        assert job.body == "Good things are coming."
        assert job.alignment == Alignment.CENTER
        assert job.title == "✨ FORTUNE ✨"

    def test_self_test_job(self):
        job = self_test_job()
        assert job.title == "🎉 THERMAL POETRY PRINTER 🎉"
        assert job.alignment == Alignment.LEFT
        assert "test print" in job.body
        assert job.footer == "Test completed! ✨"

    def test_self_test_stream(self):
        stream = encode(self_test_job())
        assert "🎉 THERMAL POETRY PRINTER 🎉\n".encode("utf-8") in stream
        assert NORMAL + LEFT + b"\n" in stream
        assert CENTER + "Test completed! ✨\n".encode("utf-8") in stream
        assert stream.endswith(b"\n\n\n\n" + CUT)
