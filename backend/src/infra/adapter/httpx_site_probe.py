import asyncio
import ssl
from datetime import datetime, timezone
from time import perf_counter
from typing import Optional

import httpx
import structlog

from core.exceptions.site_unreachable_error import SiteUnreachableError
from core.port.site_probe import ProbeResponse, SiteProbe

logger = structlog.stdlib.get_logger(__name__)


class HttpxSiteProbe(SiteProbe):
    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self.http_client = http_client

    async def fetch(self, url: str, timeout_seconds: float) -> ProbeResponse:
        started_at = perf_counter()

        try:
            response = await self.http_client.get(url, timeout=timeout_seconds)
        except httpx.TimeoutException:
            raise SiteUnreachableError(url, f"timed out after {timeout_seconds}s", timed_out=True)
        except httpx.RequestError as e:
            raise SiteUnreachableError(url, str(e) or e.__class__.__name__)

        response_time_ms = int(round((perf_counter() - started_at) * 1_000))
        logger.debug(f"Probed {url}: status_code={response.status_code}, response_time={response_time_ms}ms")

        return ProbeResponse(status_code=response.status_code, response_time_ms=response_time_ms)

    async def resolve(self, host: str) -> list[str]:
        loop = asyncio.get_running_loop()
        addresses = await loop.getaddrinfo(host, None)

        return sorted({address[4][0] for address in addresses})

    async def certificate_expiry(self, host: str, timeout_seconds: float) -> Optional[datetime]:
        url = f"https://{host}/"

        try:
            async with self.http_client.stream("HEAD", url, timeout=timeout_seconds) as response:
                network_stream = response.extensions.get("network_stream")
                ssl_object = network_stream.get_extra_info("ssl_object") if network_stream else None
                certificate = ssl_object.getpeercert() if ssl_object else None
        except httpx.TimeoutException:
            raise SiteUnreachableError(url, f"timed out after {timeout_seconds}s", timed_out=True)
        except httpx.RequestError as e:
            raise SiteUnreachableError(url, str(e) or e.__class__.__name__)

        if not certificate or "notAfter" not in certificate:
            return None

        return datetime.fromtimestamp(ssl.cert_time_to_seconds(certificate["notAfter"]), tz=timezone.utc)
