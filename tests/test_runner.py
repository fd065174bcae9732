"""
Tests for the CommandRunner retry and parsing behaviour.
"""
import logging
import time
from unittest.mock import patch

import pytest

from secretcli import CLIConfig, CommandRunner, DaemonError, DaemonNotFoundError, DeserializationError


@pytest.fixture
def runner():
    return CommandRunner(CLIConfig())


def test_run_json_appends_output_flag(runner, fake_daemon):
    """JSON commands get --output json appended after the caller's args"""
    fake_daemon.add(["q", "tx", "ABC"], {"txhash": "ABC"})

    result = runner.run_json(["q", "tx", "ABC"])

    assert result == {"txhash": "ABC"}
    assert fake_daemon.calls == [["secretd", "q", "tx", "ABC", "--output", "json"]]


def test_run_raw_has_no_output_flag(runner, fake_daemon):
    fake_daemon.add(["keys", "show"], "secret1abc\n")

    assert runner.run_raw(["keys", "show", "-a", "a"]) == "secret1abc\n"
    assert fake_daemon.calls == [["secretd", "keys", "show", "-a", "a"]]


def test_retry_until_stderr_clears(runner, fake_daemon):
    """A command is re-run while it writes to stderr"""
    fake_daemon.add(["q", "tx"], "", stderr="Error: tx (ABC) not found")
    fake_daemon.add(["q", "tx"], "", stderr="Error: tx (ABC) not found")
    fake_daemon.add(["q", "tx"], {"txhash": "ABC"})

    with patch("secretcli.runner.time.sleep") as mock_sleep:
        result = runner.run_json(["q", "tx", "ABC"])

    assert result == {"txhash": "ABC"}
    assert len(fake_daemon.calls) == 3
    assert mock_sleep.call_count == 2
    mock_sleep.assert_called_with(1.0)


def test_retry_ceiling_then_parse_last_stdout(runner, fake_daemon):
    """Twenty retries, then the last stdout is parsed regardless"""
    fake_daemon.add(["q", "tx"], "Error: not found", stderr="Error: tx not found")

    with patch("secretcli.runner.time.sleep") as mock_sleep:
        with pytest.raises(DeserializationError) as exc_info:
            runner.run_json(["q", "tx", "ABC"])

    # One initial invocation plus twenty retries
    assert len(fake_daemon.calls) == 21
    assert mock_sleep.call_count == 20
    assert exc_info.value.raw_output == "Error: not found"


def test_retry_ceiling_uses_valid_stdout(runner, fake_daemon):
    """Exhausting retries is not an error in itself"""
    fake_daemon.add(["q", "tx"], {"txhash": "ABC"}, stderr="warning: deprecated flag")

    assert runner.run_json(["q", "tx", "ABC"]) == {"txhash": "ABC"}
    assert len(fake_daemon.calls) == 21


def test_custom_retry_policy(fake_daemon):
    runner = CommandRunner(CLIConfig(max_retries=3, retry_interval=0.25))
    fake_daemon.add(["q"], "{}", stderr="busy")

    with patch("secretcli.runner.time.sleep") as mock_sleep:
        runner.run_json(["q", "tx", "ABC"])

    assert len(fake_daemon.calls) == 4
    mock_sleep.assert_called_with(0.25)


def test_exit_code_is_not_a_retry_signal(runner, fake_daemon):
    fake_daemon.add(["q"], {"ok": True}, returncode=1)

    assert runner.run_json(["q", "tx", "ABC"]) == {"ok": True}
    assert len(fake_daemon.calls) == 1


def test_invalid_json_is_not_retried(runner, fake_daemon):
    fake_daemon.add(["q"], "this is not json")

    with pytest.raises(DeserializationError, match="Invalid JSON output"):
        runner.run_json(["q", "tx", "ABC"])
    assert len(fake_daemon.calls) == 1


def test_empty_stdout_is_deserialization_error(runner, fake_daemon):
    fake_daemon.add(["q"], "")

    with pytest.raises(DeserializationError):
        runner.run_json(["q", "tx", "ABC"])


@pytest.mark.parametrize("error", [FileNotFoundError(2, "No such file"), PermissionError(13, "Permission denied")])
def test_missing_binary_raises_immediately(error):
    runner = CommandRunner(CLIConfig(binary="secretd-missing"))

    with patch("secretcli.runner.subprocess.run", side_effect=error) as mock_run:
        with pytest.raises(DaemonNotFoundError, match="Maybe secretd is not installed") as exc_info:
            runner.run_json(["q", "tx", "ABC"])

    assert mock_run.call_count == 1
    assert exc_info.value.binary == "secretd-missing"


def test_launch_error_is_distinct_from_parse_error():
    assert not issubclass(DaemonNotFoundError, DeserializationError)
    assert not issubclass(DeserializationError, DaemonNotFoundError)


def test_retry_warning_logged_once(runner, fake_daemon, caplog):
    """Repeated stderr output produces a single warning per command"""
    fake_daemon.add(["q", "tx"], "{}", stderr="Error: tx not found")

    with caplog.at_level(logging.WARNING, logger="secretcli.runner"):
        runner.run_json(["q", "tx", "ABC"])

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Error: tx not found" in warnings[0].getMessage()


def test_run_raw_retries_while_stderr(runner, fake_daemon):
    fake_daemon.add(["keys", "show"], "", stderr="busy")
    fake_daemon.add(["keys", "show"], "secret1abc\r\n")

    with patch("secretcli.runner.time.sleep") as mock_sleep:
        result = runner.run_raw(["keys", "show", "-a", "a"])

    assert result == "secret1abc\r\n"
    assert len(fake_daemon.calls) == 2
    assert mock_sleep.call_count == 1


def test_run_raw_missing_binary(runner):
    with patch("secretcli.runner.subprocess.run", side_effect=FileNotFoundError(2, "No such file")):
        with pytest.raises(DaemonNotFoundError):
            runner.run_raw(["keys", "show", "-a", "a"])


def test_other_launch_error_is_generic_daemon_error(runner):
    """Only a missing or non-executable binary gets the not-installed hint"""
    with patch("secretcli.runner.subprocess.run", side_effect=OSError(7, "Argument list too long")):
        with pytest.raises(DaemonError) as exc_info:
            runner.run_json(["tx", "compute", "execute", "secret1a", "{}"])

    assert not isinstance(exc_info.value, DaemonNotFoundError)
    assert "not installed" not in str(exc_info.value)
    assert "Argument list too long" in str(exc_info.value)


def test_retry_warning_per_target(runner, fake_daemon, caplog):
    """Failing executes against different contracts each get a warning"""
    fake_daemon.add(["tx", "compute", "execute", "secret1a"], "{}", stderr="account sequence mismatch")
    fake_daemon.add(["tx", "compute", "execute", "secret1b"], "{}", stderr="account sequence mismatch")

    with caplog.at_level(logging.WARNING, logger="secretcli.runner"):
        runner.run_json(["tx", "compute", "execute", "secret1a", "{}"])
        runner.run_json(["tx", "compute", "execute", "secret1b", "{}"])

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
