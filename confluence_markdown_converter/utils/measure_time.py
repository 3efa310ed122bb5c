import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)


def format_log_message(step: str, time: datetime, state: str) -> str:
    """Format the timestamp log message.

    Args:
        step: The step name
        time: A timestamp
        state: The execution state
    """
    return f"{step} {state} at {time.strftime('%Y-%m-%d %H:%M:%S')}"


def format_duration(duration: relativedelta) -> str:
    parts = [
        f"{value}{unit}"
        for value, unit in (
            (duration.hours, "h"),
            (duration.minutes, "m"),
        )
        if value
    ]
    seconds = duration.seconds + duration.microseconds / 1_000_000
    parts.append(f"{seconds:.2f}s")
    return " ".join(parts)


@contextmanager
def measure(step: str) -> Generator[None, None, None]:
    """Log start, end and duration of the encapsulated block.

    .. code-block:: python

        with measure("Convert page tree"):
            ...

    The log output for the above will be something like:

    .. code-block::

        Convert page tree started at 2020-07-09 13:49:00
        Convert page tree ended at 2020-07-09 13:49:02
        Convert page tree took 2.00s

    Args:
        step: The step name.

    Raises:
        e: Reraised exception from execution
    """
    start_time = datetime.now()
    logger.info(format_log_message(step, time=start_time, state="started"))
    state = "stopped"
    try:
        yield
        state = "ended"
    except Exception:
        state = "failed"
        raise
    finally:
        end_time = datetime.now()
        logger.info(format_log_message(step, time=end_time, state=state))
        duration = relativedelta(end_time, start_time)
        logger.info("%s took %s", step, format_duration(duration))
