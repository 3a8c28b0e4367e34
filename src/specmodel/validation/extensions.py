"""Caller-supplied, asynchronous validation.

An extension validator may do arbitrary out-of-process work. Its problems are
merged after the built-in rules' problems by
:func:`~specmodel.validation.engine.validate_document`. An extension that
raises fails the whole validation result; it is never silently dropped.

:class:`RemoteReferenceValidator` is the bundled example: it checks that
external ``$ref`` targets served over HTTP(S) can actually be fetched.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urldefrag

import httpx

from specmodel.core.node import Document, Node
from specmodel.core.references import is_external_ref, local_refs
from specmodel.models import ValidationProblem, ValidationProblemSeverity

logger = logging.getLogger(__name__)


class DocumentValidatorExtension(ABC):
    """Base class for extension validators.

    Example::

        class NoDraftTitle(DocumentValidatorExtension):
            async def validate_document(self, document):
                info = document.get_property("info")
                if info is not None and "draft" in (info.get_property("title") or ""):
                    return [ValidationProblem(error_code="X-001", node_path="/info", ...)]
                return []
    """

    @abstractmethod
    async def validate_document(self, document: Document) -> list[ValidationProblem]:
        """Return the problems this extension finds in *document*."""
        ...


class RemoteReferenceValidator(DocumentValidatorExtension):
    """Reports external ``$ref`` values whose HTTP(S) target cannot be fetched.

    Each distinct URL (fragment removed) is requested once; requests run
    concurrently. Relative file references are not checked.

    Args:
        client: Optional ``httpx.AsyncClient`` to use. When omitted a client
            is created per call and closed afterwards.
        timeout: Request timeout in seconds for the internally created client.
    """

    error_code = "REF-002"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def validate_document(self, document: Document) -> list[ValidationProblem]:
        targets: dict[str, list[tuple[Node, str]]] = {}
        for node, ref in local_refs(document):
            if not is_external_ref(ref):
                continue
            url, _ = urldefrag(ref)
            if not url.startswith(("http://", "https://")):
                logger.debug("Not checking non-HTTP reference %s", ref)
                continue
            targets.setdefault(url, []).append((node, ref))
        if not targets:
            return []

        if self._client is not None:
            reachable = await self._check_all(self._client, list(targets))
        else:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                reachable = await self._check_all(client, list(targets))

        problems: list[ValidationProblem] = []
        for url, users in targets.items():
            reason = reachable[url]
            if reason is None:
                continue
            for node, ref in users:
                problems.append(
                    ValidationProblem(
                        error_code=self.error_code,
                        node_path=str(node.path()),
                        property_name="$ref",
                        message=f"External reference '{ref}' could not be fetched: {reason}",
                        severity=ValidationProblemSeverity.MEDIUM,
                        context={"ref": ref, "reason": reason},
                    )
                )
        return problems

    async def _check_all(self, client: httpx.AsyncClient, urls: list[str]) -> dict[str, Optional[str]]:
        results = await asyncio.gather(*(self._check(client, url) for url in urls))
        return dict(zip(urls, results))

    @staticmethod
    async def _check(client: httpx.AsyncClient, url: str) -> Optional[str]:
        """Return ``None`` when *url* is reachable, otherwise a short reason."""
        try:
            response = await client.get(url)
        except httpx.RequestError as exc:
            return f"{type(exc).__name__}: {exc}"
        if response.status_code >= 400:
            return f"HTTP {response.status_code}"
        return None
