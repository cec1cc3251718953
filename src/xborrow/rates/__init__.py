from __future__ import annotations

from .base import BaseRateProvider
from .onchain import OnchainRateProvider

__all__ = ["BaseRateProvider", "OnchainRateProvider"]
