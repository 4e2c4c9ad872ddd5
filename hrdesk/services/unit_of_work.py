from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy.exc import IntegrityError

from hrdesk.config import get_settings
from hrdesk.exceptions import ConflictRetryableError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_unit_of_work(
    session: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    label: str,
    retries: int | None = None,
) -> T:
    """Run ``work`` and commit, as one atomic unit.

    Any exception rolls the session back before propagating, so a failed unit
    leaves no partial writes. Balance conflicts (a lost version race, or two
    writers creating the same row) re-run ``work`` from scratch up to
    ``retries`` more times before surfacing as ``ConflictRetryableError``.
    """
    if retries is None:
        retries = get_settings().balance_conflict_retries
    attempts = 1 + max(retries, 0)

    for attempt in range(1, attempts + 1):
        try:
            result = await work()
            await session.commit()
        except (ConflictRetryableError, IntegrityError) as exc:
            await session.rollback()
            if attempt >= attempts:
                logger.warning("Giving up on %s after %d conflicting attempt(s)", label, attempt)
                if isinstance(exc, IntegrityError):
                    raise ConflictRetryableError() from exc
                raise
            logger.warning("Conflict during %s (attempt %d/%d), retrying", label, attempt, attempts)
        except Exception:
            await session.rollback()
            raise
        else:
            return result

    # Unreachable: the loop either returns or raises on its last attempt.
    raise ConflictRetryableError()
