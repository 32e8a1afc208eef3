"""Utility modules for alipay_gateway."""

from . import hashing
from . import raw_json
from . import time

__all__ = ['hashing', 'raw_json', 'time']
