"""HTTP check procedure adapter."""

import time
from typing import Optional

import httpx

from healthtree.core.health.promise import Promise
from healthtree.schemas.health import Status


class HttpProcedure:
    """Probes a URL and reports ``UP`` when it answers with *expected_status*.

    Unreachable hosts and unexpected status codes are reported as ``DOWN``
    (the dependency is unhealthy). Anything else raised while probing marks
    the check itself as broken.
    """

    def __init__(
        self,
        url: str,
        *,
        method: str = "GET",
        expected_status: int = 200,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url
        self._method = method
        self._expected_status = expected_status
        self._client = client

    async def __call__(self, promise: Promise) -> None:
        start = time.perf_counter()
        try:
            if self._client is not None:
                response = await self._client.request(self._method, self._url)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.request(self._method, self._url)
        except httpx.TimeoutException:
            promise.try_fail(f"Request to {self._url} timed out")
            return
        except httpx.TransportError as e:
            promise.try_fail(f"Connection error: {e}")
            return
        latency = round((time.perf_counter() - start) * 1000, 2)

        data = {"url": self._url, "status_code": response.status_code, "latency_ms": latency}
        if response.status_code == self._expected_status:
            promise.try_complete(Status.OK(data))
        else:
            data["cause"] = f"Expected {self._expected_status}, got {response.status_code}"
            promise.try_complete(Status.KO(data))
