from __future__ import annotations

import asyncio
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from nfpachem.core.config import settings
from nfpachem.modules.chemicals.schemas import IdentifierType

logger = structlog.get_logger()


def clean_name(name: str) -> str:
    """Drop qualifiers after the first ``", "`` (``"Phosphorus, red"`` -> ``"Phosphorus"``).

    IUPAC names never put a space after a comma, so they pass through intact.
    """
    cut = name.find(", ")
    if cut != -1:
        name = name[:cut]
    return name.strip()


def replace_spaces(name: str, separator: str) -> str:
    return name.replace(" ", separator)


class IdentifierResolver(ABC):
    """Abstract base class for external chemical-name resolution services."""

    name: str = "base"

    @abstractmethod
    async def resolve(
        self,
        name: str,
        id_type: IdentifierType,
        *,
        timeout: float | None = None,
    ) -> str | None:
        """Return the identifier of ``id_type`` for ``name``, or None.

        Must never raise for transport or parse failures: "unknown chemical"
        and "service unreachable" both come back as None.
        """
        ...


class HttpIdentifierResolver(IdentifierResolver):
    """Resolver backed by a JSON-over-HTTP GET endpoint.

    Subclasses supply the URL for a cleaned name and the path into the JSON
    response.  The ``httpx.AsyncClient`` is shared and safe to use from many
    concurrent resolutions.
    """

    space_separator: str = "%20"
    supported_types: frozenset[IdentifierType] = frozenset(IdentifierType)

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        timeout: float | None = None,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.resolver_timeout_seconds

    def supports(self, id_type: IdentifierType) -> bool:
        return id_type in self.supported_types

    def format_name(self, name: str) -> str:
        escaped = urllib.parse.quote(clean_name(name), safe=" ")
        return replace_spaces(escaped, self.space_separator)

    @abstractmethod
    def build_url(self, name: str, id_type: IdentifierType) -> str:
        """URL for an already cleaned and space-escaped name."""
        ...

    @abstractmethod
    def parse_response(self, data: Any, id_type: IdentifierType) -> str | None:
        """Extract the identifier from the decoded JSON body."""
        ...

    async def resolve(
        self,
        name: str,
        id_type: IdentifierType,
        *,
        timeout: float | None = None,
    ) -> str | None:
        if not self.supports(id_type):
            return None
        formatted = self.format_name(name)
        if not formatted:
            return None

        url = self.build_url(formatted, id_type)
        try:
            return await asyncio.wait_for(
                self._fetch(url, id_type),
                timeout=timeout if timeout is not None else self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("resolver_timeout", resolver=self.name, chemical=name, id_type=id_type.value)
        except httpx.HTTPStatusError as e:
            # Services answer 404/500 for names they do not know
            logger.info(
                "resolver_no_match",
                resolver=self.name,
                chemical=name,
                id_type=id_type.value,
                status=e.response.status_code,
            )
        except Exception:
            logger.warning(
                "resolver_request_failed",
                resolver=self.name,
                chemical=name,
                id_type=id_type.value,
                exc_info=True,
            )
        return None

    async def _fetch(self, url: str, id_type: IdentifierType) -> str | None:
        resp = await self.client.get(url)
        resp.raise_for_status()
        value = self.parse_response(resp.json(), id_type)
        if value is None:
            return None
        value = str(value).strip()
        return value or None
