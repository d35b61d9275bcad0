"""Wall-clock formatting for the time and date lines."""

from datetime import datetime
from typing import Optional


class Clock:
    """Produces the formatted time and date strings."""

    TIME_FORMAT = "%I:%M:%S %p"

    def tick(self, now: Optional[datetime] = None) -> tuple[str, str]:
        """Format the current time and date.

        Args:
            now: Moment to format (defaults to the local wall clock)

        Returns:
            Tuple of time ("02:15:07 PM") and date ("Jan 5, Mon")
        """
        if now is None:
            now = datetime.now()
        return self.format_time(now), self.format_date(now)

    @classmethod
    def format_time(cls, moment: datetime) -> str:
        return moment.strftime(cls.TIME_FORMAT)

    @staticmethod
    def format_date(moment: datetime) -> str:
        # Day of month is not zero-padded
        return f"{moment:%b} {moment.day}, {moment:%a}"
