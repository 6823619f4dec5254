"""Progressive terminal display for stream mode."""

import logging
import shutil
import sys
import time
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

CLEAR_SCREEN = '\033[2J'
MOVE_CURSOR = '\033[H'

MILESTONES = frozenset([10, 100, 1000, 10000, 100000, 1000000])
# header, footer and a safety margin
RESERVED_ROWS = 7
MIN_VISIBLE_LINES = 10


def refresh_batch_size(count: int) -> int:
    """Refresh every N samples, growing with the amount of data seen."""
    if count > 100000:
        return 10000
    if count > 10000:
        return 1000
    if count > 1000:
        return 100
    return 10


def should_refresh(count: int, elapsed_ms: float, interval_ms: int = 500) -> bool:
    """
    Decide whether to re-resolve and repaint after ``count`` samples.

    The first few samples, powers of ten and every batch boundary refresh,
    as does any sample arriving ``interval_ms`` after the last repaint.
    """
    if count <= 5 or count in MILESTONES:
        return True
    if count % refresh_batch_size(count) == 0:
        return True
    return elapsed_ms >= interval_ms


class StreamProgress:
    """
    Shows the source generated so far while samples are still being read.

    On a terminal every update clears the screen and shows the (truncated)
    current source between a progress header and footer. On any other
    output only the final source is written.
    """

    def __init__(self, output: Optional[TextIO] = None, interval_ms: int = 500,
                 is_terminal: Optional[bool] = None):
        self.output = output if output is not None else sys.stdout
        self.interval_ms = interval_ms
        if is_terminal is None:
            isatty = getattr(self.output, 'isatty', None)
            is_terminal = bool(isatty and isatty())
        self.is_terminal = is_terminal
        self._last_text: Optional[str] = None
        self._last_update = time.monotonic()

    def due(self, count: int) -> bool:
        """True if a refresh is due after ``count`` samples."""
        elapsed_ms = (time.monotonic() - self._last_update) * 1000.0
        return should_refresh(count, elapsed_ms, self.interval_ms)

    def update(self, text: str, current: int, total: Optional[int] = None) -> bool:
        """
        Show intermediate output. Unchanged text is not repainted.

        Returns:
            True if anything was written.
        """
        if text == self._last_text or not self.is_terminal:
            return False
        self._last_text = text
        self._last_update = time.monotonic()
        progress = f"{current}/{total}" if total else f"{current}"
        rows = shutil.get_terminal_size(fallback=(80, 24)).lines
        available = max(rows - RESERVED_ROWS, MIN_VISIBLE_LINES)
        lines = text.split('\n')
        out = self.output
        out.write(CLEAR_SCREEN + MOVE_CURSOR)
        out.write(f"=== Processing JSON objects: {progress} ===\n\n")
        if len(lines) > available:
            out.write('\n'.join(lines[:available - 1]))
            out.write(f"\n... ({len(lines) - available + 1} more lines)")
        else:
            out.write(text)
        out.write(f"\n\n⏳ Processing... ({progress})")
        out.flush()
        return True

    def finish(self, text: str, total: int) -> None:
        """Show the final output."""
        out = self.output
        if self.is_terminal:
            out.write(CLEAR_SCREEN + MOVE_CURSOR)
            out.write(text)
            out.write(f"\n\n✅ Complete! Processed {total} objects\n")
        else:
            out.write(text)
        out.flush()
        self._last_text = text
        logger.info("processed %d objects", total)
