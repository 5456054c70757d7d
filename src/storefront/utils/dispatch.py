"""Synchronous command dispatch with conflict translation."""

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.domain import logger
from storefront.exceptions import ConflictError


def dispatch(command):
    """Process ``command`` synchronously and return the handler's result.

    Command handlers already retry optimistic-concurrency conflicts a bounded
    number of times (``[server.version_retry]``). A conflict that survives the
    retries is surfaced as ``ConflictError``.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.warning(
            "command_conflict_exhausted",
            command=command.__class__.__name__,
            error=str(exc),
        )
        raise ConflictError(f"Concurrent update conflict while processing {command.__class__.__name__}") from exc
