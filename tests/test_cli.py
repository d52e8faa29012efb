"""Tests for the playground CLI."""

import io

import pytest

from realclientip.cli.__main__ import main, parse_args
from realclientip.cli.playground import Playground, parse_header_line
from realclientip.configs.system import StrategyConfig

HEADER_LINES = [
    "X-Forwarded-For: 1.1.1.1, 2001:db8:cafe::99%eth0, 3.3.3.3, 192.168.1.1",
    "Forwarded: For=fe80::abcd;By=fe80::1234, Proto=https;For=::ffff:188.0.2.128, "
    'For="[2001:db8:cafe::17]:4848", For=fc00::1',
    "X-Real-IP: 4.4.4.4",
]
REMOTE_ADDR = "192.168.1.2:8888"


class TestParseHeaderLine:
    def test_valid(self):
        assert parse_header_line("X-Real-IP: 4.4.4.4") == ("X-Real-IP", "4.4.4.4")
        assert parse_header_line("Forwarded:for=[::1]:80") == ("Forwarded", "for=[::1]:80")

    def test_invalid(self):
        with pytest.raises(ValueError, match="Name: value"):
            parse_header_line("X-Real-IP 4.4.4.4")
        with pytest.raises(ValueError):
            parse_header_line(": 4.4.4.4")


class TestPlayground:
    def _playground(self) -> tuple[Playground, io.StringIO]:
        out = io.StringIO()
        return Playground(HEADER_LINES, REMOTE_ADDR, output_stream=out), out

    def test_run(self):
        playground, out = self._playground()

        result = playground.run(
            StrategyConfig(
                type="rightmost_trusted_range",
                header="X-Forwarded-For",
                trusted_ranges=["192.168.0.0/16", "3.3.3.3"],
            )
        )

        assert result == "2001:db8:cafe::99%eth0"
        assert out.getvalue() == "2001:db8:cafe::99%eth0\n"

    def test_run_trusted_count(self):
        playground, _ = self._playground()

        result = playground.run(
            StrategyConfig(
                type="rightmost_trusted_count", header="Forwarded", trusted_count=2
            )
        )

        assert result == "2001:db8:cafe::17"

    def test_run_no_result(self):
        playground, out = self._playground()

        assert playground.run(
            StrategyConfig(type="single_ip_header", header="CF-Connecting-IP")
        ) is None
        assert out.getvalue() == "(none)\n"

    def test_run_all(self):
        playground, out = self._playground()

        results = playground.run_all()

        assert results == {
            "RemoteAddrStrategy()": "192.168.1.2",
            "LeftmostNonPrivateStrategy(header_name='X-Forwarded-For')": "1.1.1.1",
            "RightmostNonPrivateStrategy(header_name='X-Forwarded-For')": "3.3.3.3",
            "LeftmostNonPrivateStrategy(header_name='Forwarded')": "188.0.2.128",
            "RightmostNonPrivateStrategy(header_name='Forwarded')": "188.0.2.128",
            "SingleIPHeaderStrategy(header_name='X-Real-Ip')": "4.4.4.4",
        }
        assert "RemoteAddrStrategy()\n    192.168.1.2\n" in out.getvalue()


class TestMain:
    def test_parse_args(self):
        args = parse_args(
            [
                "-H",
                "X-Forwarded-For: 1.1.1.1",
                "--header",
                "X-Forwarded-For: 2.2.2.2",
                "--strategy",
                "rightmost_trusted_range",
                "--trusted-range",
                "10.0.0.0/8",
                "--trusted-range",
                "3.3.3.3",
            ]
        )

        assert args.headers == ["X-Forwarded-For: 1.1.1.1", "X-Forwarded-For: 2.2.2.2"]
        assert args.trusted_ranges == ["10.0.0.0/8", "3.3.3.3"]
        assert args.all is False

    def test_success(self, capsys, restore_logging):
        code = main(
            [
                "--remote-addr",
                REMOTE_ADDR,
                "-H",
                "X-Forwarded-For: 1.1.1.1, 3.3.3.3",
                "-H",
                "X-Forwarded-For: 192.168.1.1",
                "--strategy",
                "rightmost_non_private",
                "--header-name",
                "x-forwarded-for",
            ]
        )

        assert code == 0
        assert capsys.readouterr().out == "3.3.3.3\n"

    def test_no_result(self, capsys, restore_logging):
        code = main(
            ["--strategy", "single_ip_header", "--header-name", "X-Real-IP"]
        )

        assert code == 1
        assert capsys.readouterr().out == "(none)\n"

    def test_configured_strategy(self, capsys, restore_logging):
        code = main(["--remote-addr", "[2001:db8::1]:443"])

        assert code == 0
        assert capsys.readouterr().out == "2001:db8::1\n"

    def test_all(self, capsys, restore_logging):
        code = main(["--remote-addr", REMOTE_ADDR, "--all", "-H", "X-Real-IP: nope"])

        assert code == 0
        out = capsys.readouterr().out
        assert "SingleIPHeaderStrategy(header_name='X-Real-Ip')\n    (none)\n" in out

    def test_invalid_strategy_settings(self, capsys, restore_logging):
        code = main(["--strategy", "rightmost_trusted_count", "--header-name", "Forwarded"])

        assert code == 2
        assert "greater than zero" in capsys.readouterr().err

    def test_invalid_header_line(self, capsys, restore_logging):
        code = main(["-H", "no colon here", "--all"])

        assert code == 2
        assert "Name: value" in capsys.readouterr().err
