"""Port: speech model artifact download."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol


class ModelDownloader(Protocol):
    """Abstract streamed download with byte progress and cooperative cancel."""

    def download(
        self,
        url: str,
        destination: Path,
        *,
        on_progress: Callable[[float | None], None] | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> Path:
        """Fetch *url* into a temporary file, then atomically move it to *destination*.

        Reports progress as a fraction in [0, 1], or None when the total size is
        unknown. Raises AcquisitionError on failure or cancellation; no partial
        file is left at *destination* in either case.
        """
        ...
