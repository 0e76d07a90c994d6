"""Schedule checking logic for cron-based backup runs."""

from datetime import datetime
from typing import Optional

from croniter import croniter

from .errors import ConfigurationError


class ScheduleChecker:
    """Handles evaluation of the cron schedule gating scheduled runs."""

    @staticmethod
    def should_run(schedule: Optional[str], current_time: datetime = None) -> bool:
        """
        Check if a scheduled run is due today.

        Args:
            schedule: Cron expression, or None to run on every invocation
            current_time: Current time (defaults to now)

        Returns:
            True if the schedule matched between midnight and now, False otherwise
        """
        if schedule is None or not schedule.strip():
            return True

        if current_time is None:
            current_time = datetime.now()

        schedule = schedule.strip()

        try:
            cron = croniter(schedule, current_time)
            prev_occurrence = cron.get_prev(datetime)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Error evaluating schedule '{schedule}': {e}") from e

        # cron invokes us once a day; anything that matched since midnight counts
        today_start = current_time.replace(hour=0, minute=0, second=0, microsecond=0)

        return prev_occurrence >= today_start

    @staticmethod
    def next_run_time(schedule: str, current_time: datetime = None) -> datetime:
        """
        Get the next time the schedule fires.

        Args:
            schedule: Cron expression
            current_time: Current time (defaults to now)

        Returns:
            Next scheduled run time
        """
        if current_time is None:
            current_time = datetime.now()

        try:
            cron = croniter(schedule.strip(), current_time)
            return cron.get_next(datetime)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(
                f"Error calculating next run time for schedule '{schedule}': {e}"
            ) from e

    @staticmethod
    def validate_schedule_format(schedule: str) -> bool:
        """Validate that a schedule string is a valid cron expression."""
        return croniter.is_valid(schedule.strip())
