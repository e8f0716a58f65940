"""In-process compensating transaction runner."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")

CompensationFn = Callable[[], Awaitable[None]]


class Saga:
    """Run one unit of work and undo its recorded side effects on failure.

    Compensations form a LIFO stack: the last one registered runs first.
    A failing compensation is logged and skipped so the rest still run, and
    the error from the unit of work is always the one re-raised.

    Instances are single-use and request-scoped; nothing is persisted, so a
    crash mid-run leaves earlier side effects in place.
    """

    def __init__(self) -> None:
        self._compensations: list[CompensationFn] = []

    def add_compensation(self, fn: CompensationFn) -> None:
        self._compensations.append(fn)

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except Exception:
            await self._compensate()
            raise

    async def _compensate(self) -> None:
        logger.info(
            "Starting compensation process",
            compensation_count=len(self._compensations),
        )

        for compensation in reversed(self._compensations):
            try:
                await compensation()
                logger.debug("Compensation step completed successfully")
            except Exception as exc:
                logger.bind(
                    error=str(exc), error_type=type(exc).__name__
                ).exception("Compensation step failed")

        logger.info("Compensation process completed")
