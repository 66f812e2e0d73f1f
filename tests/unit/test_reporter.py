"""Tests for hotpotato.reporter - coordinator status lines."""

from __future__ import annotations

import io

from hotpotato.messages import GameMessage, MessageFlag
from hotpotato.reporter import StatusReporter


class TestStatusReporter:
    """Tests for StatusReporter formatting and dispatch."""

    def test_line_formats(self):
        stream = io.StringIO()
        reporter = StatusReporter(stream)
        reporter.holds(0, 6)
        reporter.drops_out(1, -1)
        reporter.wins(2)
        assert stream.getvalue().splitlines() == [
            "Peer 0 holds token 6",
            "Peer 1 holds token -1 (peer 1 drops out)",
            "Peer 2 wins",
        ]
        assert reporter.lines == stream.getvalue().splitlines()

    def test_report_dispatches_on_flag(self, reporter):
        reporter.report(GameMessage(3, 4, 1, MessageFlag.CONTINUE))
        reporter.report(GameMessage(1, -2, 2, MessageFlag.ELIMINATED))
        reporter.report(GameMessage(2, 9, 2, MessageFlag.GAME_OVER))
        assert reporter.lines == [
            "Peer 3 holds token 4",
            "Peer 1 holds token -2 (peer 1 drops out)",
            "Peer 2 wins",
        ]

    def test_silent_handoff_prints_nothing(self, reporter):
        reporter.report(GameMessage(1, -1, 2, MessageFlag.CONTINUE_SILENT))
        assert reporter.lines == []

    def test_defaults_to_stdout(self, capsys):
        StatusReporter().wins(0)
        assert capsys.readouterr().out == "Peer 0 wins\n"
