from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from .config import ConfigManager


class BaseSystem(ABC):
    """
    Long-lived service with an async start/stop pair.

    Subclasses do their own work first and then call `super()`, which
    flips `is_ready`. Using the system as an async context manager starts
    it on entry (unless already started) and stops it on exit.
    """
    def __init__(self, config: 'ConfigManager'):
        self.config = config
        self._is_ready = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    @abstractmethod
    async def initialize(self):
        self._is_ready = True
        logger.debug(f"{self.name} ready")

    @abstractmethod
    async def shutdown(self):
        self._is_ready = False
        logger.debug(f"{self.name} stopped")

    async def __aenter__(self):
        if not self.is_ready:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.is_ready:
            await self.shutdown()
        return False
