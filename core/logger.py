import sys
import time
import traceback

from core.utils import env_vars

DEBUG = env_vars("DEBUG", "false")


class Logger:
    SILENT = 0
    NORMAL = 1
    VERBOSE = 2

    def __init__(self, name: str, mode: int = NORMAL, start: float | None = None):
        self.name = name
        self.start = start if start is not None else time.time()
        self.mode = Logger.VERBOSE if DEBUG else mode

    def print(self, msg: str) -> None:
        print(f"{self.time_diff():.2f}: [{self.name}]: {msg}", flush=True)

    def error(self, message: str) -> None:
        # errors are always printed, even when silent
        self.print(f"[ERROR]: {message}")

    def log(self, message: str) -> None:
        if self.mode >= Logger.NORMAL:
            self.print(message)

    def debug(self, message: str) -> None:
        if self.mode >= Logger.VERBOSE:
            self.print(f"[DEBUG]: {message}")

    def warn(self, message: str) -> None:
        if self.mode >= Logger.NORMAL:
            self.print(f"[WARN]: {message}")

    def is_verbose(self) -> bool:
        return self.mode >= Logger.VERBOSE

    def time_diff(self) -> float:
        return time.time() - self.start

    def exception(self) -> None:
        exc_type, exc_value, exc_traceback = sys.exc_info()
        if exc_type is None:
            return
        self.print(f"[ERROR]: {exc_type.__name__}: {exc_value}")
        for line in traceback.format_tb(exc_traceback):
            self.print(line.rstrip())
