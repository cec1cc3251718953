"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import XBorrowSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed through the CLI commands to avoid global state and enable testing.
    """

    settings: XBorrowSettings
    logger: logging.Logger
