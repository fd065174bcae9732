"""
Process runner for the daemon binary.
"""
import json
import logging
import subprocess
import time
from typing import Any, List, Optional, Sequence

from ._rate_limited_log import rate_limited_log
from .config import CLIConfig
from .exceptions import DaemonError, DaemonNotFoundError, DeserializationError

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Runs daemon commands and parses their output.

    A command that writes anything to stderr is treated as not yet
    settled: the runner sleeps ``retry_interval`` seconds and runs it
    again, up to ``max_retries`` times. Once retries are exhausted the
    last stdout is used as is. Exit codes are only logged.
    """

    def __init__(self, config: Optional[CLIConfig] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize the runner

        Args:
            config: Runner settings (defaults to ``CLIConfig()``)
            logger: Optional logger instance to use for debug/info logging
        """
        self.config = config or CLIConfig()
        self.logger = logger or logging.getLogger(__name__)

    def run_json(self, args: Sequence[str]) -> Any:
        """
        Run a daemon command with JSON output and parse stdout.

        Args:
            args: Command-line arguments, without the binary name

        Returns:
            The decoded JSON value

        Raises:
            DaemonNotFoundError: If the binary cannot be launched
            DaemonError: If launching fails for another OS-level reason
            DeserializationError: If stdout is not a single JSON document
        """
        command = list(args) + list(self.config.output_flags)
        stdout = self._run_with_retry(command)
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON from '{self._describe(command)}': {e}")
            raise DeserializationError(
                f"Invalid JSON output from {self.config.binary}: {e}",
                raw_output=stdout
            ) from e

    def run_raw(self, args: Sequence[str]) -> str:
        """
        Run a daemon command and return its stdout text unparsed.

        Args:
            args: Command-line arguments, without the binary name

        Returns:
            stdout of the last invocation

        Raises:
            DaemonNotFoundError: If the binary cannot be launched
            DaemonError: If launching fails for another OS-level reason
        """
        return self._run_with_retry(list(args))

    def _run_with_retry(self, command: List[str]) -> str:
        description = self._describe(command)
        result = self._invoke(command)

        # Queries against a freshly broadcast tx fail until it is included in a block
        for attempt in range(1, self.config.max_retries + 1):
            if not result.stderr:
                break
            if not rate_limited_log(
                f"{description} wrote to stderr, retrying every {self.config.retry_interval}s: "
                f"{result.stderr.strip()}",
                key=f"retry:{self._describe(command, depth=4)}",
                logger_instance=self.logger,
            ):
                self.logger.debug(f"Retry {attempt}/{self.config.max_retries} for {description}")
            time.sleep(self.config.retry_interval)
            result = self._invoke(command)

        return result.stdout or ""

    def _invoke(self, command: List[str]) -> subprocess.CompletedProcess:
        argv = [self.config.binary] + command
        self.logger.debug(f"Running {self._describe(command)}")
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except (FileNotFoundError, PermissionError) as e:
            self.logger.error(f"Failed to launch {self.config.binary}: {e}")
            raise DaemonNotFoundError(
                f"Unable to run {self.config.binary}. Maybe secretd is not installed? ({e})",
                binary=self.config.binary
            ) from e
        except OSError as e:
            self.logger.error(f"Failed to launch {self.config.binary}: {e}")
            raise DaemonError(f"Unable to run {self._describe(command)}: {e}") from e

        self.logger.debug(f"Exit code {result.returncode} from {self._describe(command)}")
        return result

    def _describe(self, command: Sequence[str], depth: int = 3) -> str:
        # Leading arguments only; messages can be large
        head = [arg for arg in command[:depth] if not arg.startswith("{")]
        return " ".join([self.config.binary] + head)
