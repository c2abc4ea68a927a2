from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from research_synth.core.config import Settings
from research_synth.core.exceptions import FetchError
from research_synth.schemas.synthesis import SourceInput
from research_synth.services.web_fetcher import fetch_url_text, truncate_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedSource:
    id: int
    label: str
    text: str
    url: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


async def _fetch_one(
    index: int,
    source: SourceInput,
    *,
    settings: Settings,
    client: httpx.AsyncClient,
    semaphore: asyncio.Semaphore,
) -> FetchedSource:
    if source.type == "text":
        return FetchedSource(
            id=index,
            label=source.label or f"Source {index + 1}",
            text=truncate_text(source.content, settings.max_source_chars),
        )

    url = source.content.strip()
    async with semaphore:
        try:
            text = await fetch_url_text(
                url,
                timeout_s=settings.fetch_timeout_s,
                max_chars=settings.max_source_chars,
                client=client,
            )
        except FetchError as exc:
            logger.warning("Fetch failed for source %d: %s", index, exc, extra={"source_id": index})
            return FetchedSource(
                id=index,
                label=source.label or f"Source {index + 1}",
                text="",
                url=url,
                error=str(exc) or exc.__class__.__name__,
            )

    logger.info("Fetched source %d (%d chars)", index, len(text), extra={"source_id": index})
    return FetchedSource(
        id=index,
        label=source.label or f"Source {index + 1} ({url})",
        text=text,
        url=url,
    )


async def fetch_sources(
    sources: list[SourceInput],
    *,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> list[FetchedSource]:
    """
    Resolve every input source to a FetchedSource, in input order.

    URL sources are fetched concurrently with bounded parallelism over one
    shared client. A failed fetch yields an empty-text FetchedSource carrying
    the error message; it never aborts its siblings.
    """
    # keep it small; avoids hammering sites
    semaphore = asyncio.Semaphore(max(1, settings.fetch_concurrency))

    async def run(shared: httpx.AsyncClient) -> list[FetchedSource]:
        return list(
            await asyncio.gather(
                *(
                    _fetch_one(i, s, settings=settings, client=shared, semaphore=semaphore)
                    for i, s in enumerate(sources)
                )
            )
        )

    if client is not None:
        return await run(client)

    async with httpx.AsyncClient(
        timeout=settings.fetch_timeout_s,
        follow_redirects=True,
    ) as shared_client:
        return await run(shared_client)
