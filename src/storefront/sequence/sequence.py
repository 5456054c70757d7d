"""Per-day order-number counter.

One ``OrderSequence`` exists per calendar day (UTC), keyed by ``YYMMDD``.
Handing out a number means incrementing ``last_value`` and saving the record
with the version it was read at, so two concurrent checkouts can never both
persist the same value: the loser's save is rejected and its handler retried.

The version check only protects a row that is already stored. The first
checkout of a day therefore commits an empty counter on its own, outside the
running transaction, and then re-runs so that every increment happens
against the stored, versioned row.
"""

from datetime import UTC, datetime

from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import DateTime, Integer, String
from protean.utils.globals import current_domain, current_uow
from sqlalchemy.exc import IntegrityError

from storefront.domain import logger, storefront
from storefront.exceptions import ConflictError

SEQUENCE_WIDTH = 4
MAX_SEQUENCE = 10**SEQUENCE_WIDTH - 1


def day_key(moment=None):
    return (moment or datetime.now(UTC)).strftime("%y%m%d")


def format_order_number(day, value, prefix=None):
    prefix = prefix or current_domain.config["custom"]["ORDER_NUMBER_PREFIX"]
    return f"{prefix}{day}{value:0{SEQUENCE_WIDTH}d}"


@storefront.aggregate
class OrderSequence:
    day = String(identifier=True, max_length=6)
    last_value = Integer(default=0, min_value=0, max_value=MAX_SEQUENCE)
    updated_at = DateTime()

    def next_value(self):
        if self.last_value >= MAX_SEQUENCE:
            raise ConflictError(f"All {MAX_SEQUENCE} order numbers for {self.day} have been used")
        self.last_value += 1
        self.updated_at = datetime.now(UTC)
        return self.last_value


@storefront.repository(part_of=OrderSequence)
class OrderSequenceRepository:
    def open_day(self, day):
        """Store an empty counter for ``day`` unless one exists.

        Commits immediately, even when called inside a Unit of Work. Losing
        the race to another checkout that opened the same day is fine.
        """
        if self.get_or_none(day) is not None:
            return
        try:
            self._dao.outside_uow().create(day=day, last_value=0)
        except (ValidationError, IntegrityError):
            logger.debug("order_sequence_already_open", day=day)
        else:
            logger.info("order_sequence_opened", day=day)


def next_order_number(moment=None):
    """Claim the next number for the day of ``moment`` (defaults to now).

    Must run inside the Unit of Work that persists the order, so the counter
    and the order commit together. When the day has no stored counter yet,
    the counter is opened and ``ExpectedVersionError`` is raised so the
    command handler retries in a transaction that can see it.
    """
    day = day_key(moment)
    repo = current_domain.repository_for(OrderSequence)
    sequence = repo.get_or_none(day)
    if sequence is None:
        repo.open_day(day)
        if current_uow:
            raise ExpectedVersionError(f"Order sequence for {day} was opened by this checkout")
        sequence = repo.get(day)

    value = sequence.next_value()
    repo.add(sequence)
    return format_order_number(day, value)
