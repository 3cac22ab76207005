"""
Debug logging for Salesforce payloads.

Remote records are dumped at DEBUG level on every environment except live.
With extra debugging enabled the same data is also mirrored to a secondary
sink (by default a dedicated logger that can be routed separately).
"""

import logging
import pprint
from typing import Any, Callable, Optional

from .settings import Settings

logger = logging.getLogger(__name__)

EXTRA_DEBUG_LOGGER_NAME = 'salesforce_contacts.extra_debug'

DebugSink = Callable[[str, Any], None]


def _default_sink(method: str, data: Any) -> None:
    logging.getLogger(EXTRA_DEBUG_LOGGER_NAME).info(f"{method}: {pprint.pformat(data)}")


class DebugLogger:
    """
    Environment-gated debug logger for one component.

    Args:
        component: Name shown in each entry (usually the class name)
        settings: Settings providing environment and extra-debugging flags
        log: Logger to write to (defaults to this module's logger)
        sink: Secondary sink called with (method, data) when extra debugging is on
    """

    def __init__(
        self,
        component: str,
        settings: Settings,
        log: Optional[logging.Logger] = None,
        sink: Optional[DebugSink] = None
    ):
        self.component = component
        self.settings = settings
        self.log = log or logger
        self.sink = sink or _default_sink

    @property
    def enabled(self) -> bool:
        return not self.settings.is_live_environment

    def __call__(self, method: str, data: Any) -> None:
        """
        Log data returned by a Salesforce call.

        Args:
            method: Name of the calling method
            data: Record, list of records or metadata payload
        """
        if not self.enabled:
            return

        self.log.debug(f"{self.component}=>{method} : {pprint.pformat(data)}")

        if self.settings.extra_debugging:
            self.sink(method, data)
