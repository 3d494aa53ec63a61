"""
Alert evaluation driver.

Components:
    scanner: AlertScanner running condition checks per cycle

Example:
    >>> from logalert.detection import AlertScanner
    >>> scanner = AlertScanner(conditions, on_alert=notify)
    >>> await scanner.run_cycle()
"""

from logalert.detection.scanner import (
    AlertScanner,
    DEFAULT_CHECK_TIMEOUT_SECONDS,
    condition_key,
)

__all__ = [
    "AlertScanner",
    "DEFAULT_CHECK_TIMEOUT_SECONDS",
    "condition_key",
]
