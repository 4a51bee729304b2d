"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import List

MESES_ABREVIADOS = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]


def utc_now() -> datetime:
    """Timezone-aware current time, the default clock for providers and sessions"""
    return datetime.now(timezone.utc)


def last_month_labels(reference: date, months: int = 6) -> List[str]:
    """
    Portuguese month labels for the last `months` months, oldest first.

    Example:
        reference=2024-03-10, months=4 -> ["dez", "jan", "fev", "mar"]
    """
    current = reference.month - 1
    return [MESES_ABREVIADOS[(current - offset) % 12] for offset in range(months - 1, -1, -1)]


def days_before(reference: datetime, days: float) -> date:
    """Calendar date (UTC) that lies `days` (possibly fractional) before reference"""
    return (reference - timedelta(days=days)).astimezone(timezone.utc).date()
