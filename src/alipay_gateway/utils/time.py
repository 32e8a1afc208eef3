"""
Time utilities for request timestamps.
The gateway expects local wall-clock time as ``yyyy-MM-dd HH:mm:ss``.
"""

from datetime import datetime
from typing import Callable, Optional

from ..config import TIMESTAMP_FORMAT


Clock = Callable[[], datetime]


def format_timestamp(dt: datetime) -> str:
    """
    Format a datetime as a request timestamp.
    
    Args:
        dt: datetime to format
        
    Returns:
        Timestamp string, e.g. ``2024-01-31 08:15:00``
    """
    return dt.strftime(TIMESTAMP_FORMAT)


def now(clock: Optional[Clock] = None) -> str:
    """
    Get the current request timestamp.
    
    Args:
        clock: Optional callable returning the current datetime
        
    Returns:
        Timestamp string
    """
    current = clock() if clock is not None else datetime.now()
    return format_timestamp(current)
