"""Transport port: the fetcher only needs a GET that returns status, body
and headers, so tests can replace aiohttp with a plain double."""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class HttpResponse:
    """One HTTP exchange as seen by the fetcher.

    body is the decoded JSON for status 200 and the raw text otherwise.
    """

    status_code: int
    body: Any
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""


class IHttpClient(Protocol):
    """GET-only HTTP client.

    Implementations raise NetworkError for timeouts and refused connections
    and ParseError for a 200 body that is not JSON. Status codes are not
    interpreted here; that is the error mapper's job.
    """

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse: ...

    async def close(self) -> None: ...
