from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

from .errors import ContractViolation

if TYPE_CHECKING:
    from .request import RequestDescriptor
    from .store import StoreClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page[T]:
    items: list[T] = field(default_factory=list)
    continuation_token: Any | None = None


type PageFetcher[T] = Callable[[Any | None], Awaitable[Page[T]]]


async def read_all[T](fetch_page: PageFetcher[T], *, operation: str = "read") -> list[T]:
    """Fetch pages one after another until no continuation token is returned.

    Items are concatenated in page order. The first failing page aborts the
    read and its exception propagates; items from earlier pages are dropped.
    """
    out: list[T] = []
    token: Any | None = None
    page_number = 0

    while True:
        page_number += 1
        try:
            page = await fetch_page(token)
        except Exception:
            logger.warning(
                "%s: page %d failed, discarding %d accumulated items", operation, page_number, len(out)
            )
            raise

        out.extend(page.items)
        logger.debug(
            "%s: page %d returned %d items (more=%s)",
            operation,
            page_number,
            len(page.items),
            bool(page.continuation_token),
        )
        if not page.continuation_token:
            return out
        token = page.continuation_token


async def scan_all(client: StoreClient, descriptor: RequestDescriptor) -> list[dict[str, Any]]:
    return await read_all(
        partial(client.scan_page, descriptor),
        operation=f"scan {descriptor.table_name}",
    )


async def query_all(client: StoreClient, descriptor: RequestDescriptor) -> list[dict[str, Any]]:
    if not descriptor.index_name:
        raise ContractViolation("query requires an index name")
    if not descriptor.key_condition_expression:
        raise ContractViolation("query requires a key condition expression")

    return await read_all(
        partial(client.query_page, descriptor),
        operation=f"query {descriptor.table_name}/{descriptor.index_name}",
    )
