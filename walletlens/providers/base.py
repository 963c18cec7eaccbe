from abc import ABC, abstractmethod
from typing import Optional


class NameServiceEndpoint(ABC):
    """One read-only naming-service backend.

    Implementations raise on transport or protocol failure and return None
    when the record simply is not set.
    """

    name: str

    def reset(self) -> None:
        """Drop any memoized lookup state; called when the resolution cache is flushed"""
        pass

    @abstractmethod
    async def get_name(self, address: str) -> Optional[str]:
        """Primary name bound to ``address``"""
        pass

    @abstractmethod
    async def get_address(self, name: str) -> Optional[str]:
        """Address a name points to"""
        pass

    @abstractmethod
    async def get_text(self, name: str, key: str) -> Optional[str]:
        """Text record ``key`` of ``name``"""
        pass

    @abstractmethod
    async def get_avatar(self, name: str) -> Optional[str]:
        """Avatar URI of ``name``"""
        pass
