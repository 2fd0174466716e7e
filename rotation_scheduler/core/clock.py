# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Injectable "now" — services take a Clock so date filtering stays testable."""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
