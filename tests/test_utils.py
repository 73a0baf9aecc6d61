"""Tests for the print-based logger and helpers."""

import io

from brunelnet.simulation.network import Network
from brunelnet.utils import get_logger, partial


class TestLogger:
    def test_levels_and_prefix(self, capsys):
        log = get_logger("unit")
        log.info("Stepping %d neurons", 12)
        log.warning("plain message")
        out = capsys.readouterr().out
        assert "brunelnet:unit INFO" in out
        assert "Stepping 12 neurons" in out
        assert "brunelnet:unit WARNING" in out

    def test_extra_stream(self):
        stream = io.StringIO()
        log = get_logger("unit", out=stream)
        log.error("bad value %s", 3)
        assert "brunelnet:unit ERROR" in stream.getvalue()
        assert "bad value 3" in stream.getvalue()

    def test_unformattable_message(self, capsys):
        log = get_logger("unit")
        log.debug("100% done")
        assert "100% done" in capsys.readouterr().out

    def test_direct_level_call(self, capsys):
        log = get_logger("unit")
        log("INFO", "%d spikes", 7)
        out = capsys.readouterr().out
        assert "brunelnet:unit INFO" in out
        assert "7 spikes" in out

    def test_run_is_logged(self, capsys):
        Network(2).run(10)
        out = capsys.readouterr().out
        assert "brunelnet:simulation.network INFO" in out
        assert "Running 10 steps (1.0 ms) from step 0" in out


class TestPartial:
    def test_keeps_name(self):
        def scale(x, factor=1):
            return x * factor

        triple = partial(scale, factor=3)
        assert triple(2) == 6
        assert triple.__name__ == "scale"
