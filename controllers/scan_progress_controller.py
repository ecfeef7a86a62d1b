import sys
from typing import TextIO


class ScanProgressController:
    """Print scan/transfer progress to the operator.

    In verbose mode every update is its own line. Otherwise a single status
    line is rewritten in place, padded so a shorter message fully covers the
    previous one.
    """

    def __init__(self, verbose: bool = False, stream: TextIO | None = None) -> None:
        self.verbose = verbose
        self.stream = stream if stream is not None else sys.stdout
        self.last_len = 0

    def update(self, current: int, total: int | None, message: str) -> None:
        """Report item ``current`` (of ``total`` when known)."""
        counter = f"{current}/{total}" if total else f"{current}"
        self.write(f"{counter} {message}")

    def write(self, line: str) -> None:
        if self.verbose:
            print(line, file=self.stream)
            return
        padding = max(self.last_len - len(line), 0)
        self.stream.write("\r" + line + " " * padding)
        self.stream.flush()
        self.last_len = len(line)

    def finish(self) -> None:
        """End the status line so following output starts on a fresh line."""
        if not self.verbose and self.last_len:
            self.stream.write("\n")
            self.stream.flush()
        self.last_len = 0
