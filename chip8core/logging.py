"""Console logging utilities for the CHIP-8 core.

A small leveled logger with optional colors and timestamps, plus a machine
logger that knows how to report the events a host cares about: resets,
program loads, the sound cue and failed steps.
"""

import time
import sys


class ConsoleLogger:
    """Flexible console logger with level filtering and formatters."""

    def __init__(
        self,
        name: str = "Chip8",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class MachineLogger(ConsoleLogger):
    """Logger for a running machine, tracking how many steps failed."""

    def __init__(self, name: str = "Chip8", **kwargs):
        kwargs.setdefault("log_level", "WARNING")
        super().__init__(name, **kwargs)
        self.error_count = 0

    def log_reset(self):
        self.debug("machine reset, pc=0x200")

    def log_program_loaded(self, size: int):
        if size > 0:
            self.info(f"loaded {size} bytes at 0x200-0x{0x200 + size - 1:03X}")
        else:
            self.info("loaded empty program")

    def log_sound_stopped(self):
        self.debug("sound timer reached zero, stop tone")

    def log_step_error(self, pc: int, cycle: int, error: Exception):
        """Log a failed step with the address of the instruction that failed."""
        self.error_count += 1
        self.error(f"step {cycle} at pc=0x{pc:03X} failed: {type(error).__name__}: {error}")
