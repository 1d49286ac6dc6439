from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ProbeResponse:
    status_code: int
    response_time_ms: int


class SiteProbe(ABC):
    @abstractmethod
    async def fetch(self, url: str, timeout_seconds: float) -> ProbeResponse:
        """Raise ``SiteUnreachableError`` when no response could be obtained."""
        raise NotImplementedError

    @abstractmethod
    async def resolve(self, host: str) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    async def certificate_expiry(self, host: str, timeout_seconds: float) -> Optional[datetime]:
        raise NotImplementedError
