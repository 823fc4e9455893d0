from enum import Enum


class ScanStatus(str, Enum):
    """How a single scan pass over a wallet ended."""

    SKIPPED = "skipped"  # another scan of the same wallet was active
    UP_TO_DATE = "up_to_date"
    COMPLETED = "completed"
    PARTIAL = "partial"  # stopped early, progress up to the failure kept
    ERROR = "error"
