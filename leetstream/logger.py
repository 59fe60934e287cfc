"""
Minimal logging context for leetstream.
Single place to control all output: screen + file, with flush.
"""
import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.text import Text

from leetstream.__version__ import __version__

_PREFIX_STYLES = (
    (re.compile(r"\[INFO\]"), "cyan"),
    (re.compile(r"\[WARNING\]"), "yellow"),
    (re.compile(r"\[ERROR\]"), "red"),
    (re.compile(r"\[DEBUG\]"), "grey50"),
)
_VARIATION_PATTERN = re.compile(r'"[^"]*"')


class LeetstreamLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False):
        self.log_file = log_file
        self._file_handle = None
        self._start_time = datetime.now()
        self.debug_mode = debug
        self._console = Console(highlight=False)
        self._rate_limit_note_hosts: set[str] = set()

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, 'w', buffering=1, encoding='utf-8')  # Line buffered, UTF-8

        welcome = f"({self._start_time.strftime('%H:%M:%S')}  Started leetstream {__version__})"
        if self.debug_mode:
            self.log(welcome)
        elif self._file_handle:
            self._write_file(welcome)

    def _screen_text(self, output: str) -> Text:
        """Style known prefixes and quoted queries without parsing markup."""
        text = Text(output)
        for pattern, style in _PREFIX_STYLES:
            for match in pattern.finditer(output):
                text.stylize(style, match.start(), match.end())
        for match in _VARIATION_PATTERN.finditer(output):
            text.stylize("yellow", match.start(), match.end())
        return text

    def _write_file(self, output: str) -> None:
        if self._file_handle:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())  # Force OS write

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}{msg}" if prefix else msg
        self._console.print(self._screen_text(output))
        self._write_file(output)

    def info(self, msg: str):
        """Info message"""
        self.log(msg, "[INFO] ")

    def warning(self, msg: str):
        """Warning message"""
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        """Error message"""
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(msg, f"[{timestamp}] [DEBUG] ")

    def api_wait(self, host: str, seconds: float):
        """Log request pacing once per host."""
        _ = seconds
        host_key = host.lower()
        if host_key in self._rate_limit_note_hosts:
            return
        self._rate_limit_note_hosts.add(host_key)
        self.info(f"Request pacing active for {host_key}.")

    def api_wait_debug(self, host: str, seconds: float):
        """Log pacing wait details (debug mode only)."""
        self.debug(f"Rate limiting detail: waiting {seconds:.3f}s before next {host} request")

    def api_retry(self, service: str, attempt: int, max_attempts: int, delay: float):
        """Log API retry"""
        self.warning(f"{service} request failed. Retrying in {delay}s... (attempt {attempt}/{max_attempts})")

    def api_failed(self, service: str, max_attempts: int):
        """Log API failure"""
        self.error(f"{service} not responding after {max_attempts} attempts.")

    def api_request(self, method: str, url: str, params: Optional[dict] = None):
        """Log API request (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Request: {method} {url}", f"[{timestamp}] ")
            if params:
                redacted = {k: ("***" if k == "apikey" else v) for k, v in params.items()}
                self.log(f"  Params: {json.dumps(redacted, indent=2)}", f"[{timestamp}] ")

    def api_response(self, status: int, size: int, elapsed_ms: float):
        """Log API response (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Response ({elapsed_ms:.0f}ms): Status {status}, {size} bytes", f"[{timestamp}] ")

    def close(self):
        """Close file handle with goodbye message"""
        if self._file_handle:
            end_time = datetime.now()
            elapsed = end_time - self._start_time
            goodbye = f"({end_time.strftime('%H:%M:%S')}  Ended session, elapsed {elapsed.total_seconds():.1f}s)"
            self._write_file(goodbye)
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Global instance (set by the CLI)
_logger: Optional[LeetstreamLogger] = None


def set_logger(logger: LeetstreamLogger):
    """Set global logger instance"""
    global _logger
    _logger = logger


def get_logger() -> LeetstreamLogger:
    """Get global logger instance"""
    global _logger
    if _logger is None:
        # Fallback: create stdout-only logger
        _logger = LeetstreamLogger()
    return _logger


# Convenience functions
def log(msg: str):
    get_logger().log(msg)


def info(msg: str):
    get_logger().info(msg)


def warning(msg: str):
    get_logger().warning(msg)


def error(msg: str):
    get_logger().error(msg)


def debug(msg: str):
    get_logger().debug(msg)
