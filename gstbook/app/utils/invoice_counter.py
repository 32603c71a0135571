"""Utilities for allocating invoice numbers."""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Iterator, Protocol

from ..errors import AllocationConflictError, BusinessNotFoundError

logger = logging.getLogger("gstbook.invoice_counter")


@dataclass
class CounterState:
    """Numbering state stored on a business."""

    prefix: str
    counter: int


class CounterStore(Protocol):
    """Storage capability used by :class:`InvoiceNumberAllocator`."""

    def load(self, business_id: int) -> CounterState: ...

    def existing_numbers(self, business_id: int, series: str) -> Iterable[str]: ...

    def exists(self, number: str) -> bool: ...

    def save_counter(self, business_id: int, counter: int) -> None: ...


def build_series(prefix: str, today: date | None = None) -> str:
    """Return the ``PREFIX-YEAR`` series key for ``today``.

    The year is the year of allocation, not the invoice date.
    """

    today = today or date.today()
    return f"{prefix}-{today:%Y}"


def format_invoice_number(series: str, counter: int) -> str:
    """Append the zero-padded counter; values above 9999 simply widen."""

    return f"{series}-{counter:04d}"


def parse_counter(number: str, series: str) -> int | None:
    """Return the counter part of ``number`` if it belongs to ``series``."""

    match = re.fullmatch(re.escape(series) + r"-(\d+)", number)
    return int(match.group(1)) if match else None


def highest_counter(numbers: Iterable[str], series: str) -> int:
    counters = (parse_counter(n, series) for n in numbers)
    return max((c for c in counters if c is not None), default=0)


def allocate(
    state: CounterState,
    existing: Iterable[str],
    exists: Callable[[str], bool],
    series: str,
    max_attempts: int,
    business_id: object = None,
) -> tuple[str, int]:
    """Return ``(number, counter)`` for the next free number in ``series``.

    The stored counter is first advanced to the highest counter already
    issued in the series, then incremented until a number not reported by
    ``exists`` is found.
    """

    counter = state.counter
    observed = highest_counter(existing, series)
    if observed > counter:
        logger.info(
            "invoice counter behind issued numbers; advancing",
            extra={"business": business_id, "stored": counter, "observed": observed},
        )
        counter = observed

    for _ in range(max_attempts):
        counter += 1
        candidate = format_invoice_number(series, counter)
        if not exists(candidate):
            return candidate, counter
        logger.warning(
            "invoice number collision", extra={"business": business_id, "number": candidate}
        )
    raise AllocationConflictError(business_id, max_attempts)


class InvoiceNumberAllocator:
    """Serialise invoice numbering per business within this process.

    Each business gets its own re-entrant lock so a caller can hold it across
    allocation and the insert of the invoice that uses the number. Deployments
    with more than one process rely on the unique constraint on invoice
    numbers as the backstop.

    Locks are never released from the table: there is one entry per business
    id seen, kept for the life of the process, so the table is bounded by the
    number of businesses.
    """

    def __init__(self, max_attempts: int = 10) -> None:
        self.max_attempts = max_attempts
        self._locks: dict[object, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, business_id: object) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(business_id)
            if lock is None:
                lock = self._locks[business_id] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, business_id: object) -> Iterator[None]:
        with self._lock_for(business_id):
            yield

    def next_number(
        self, store: CounterStore, business_id: int, today: date | None = None
    ) -> str:
        """Allocate a number for ``business_id`` and persist the new counter."""

        with self.hold(business_id):
            state = store.load(business_id)
            series = build_series(state.prefix, today)
            number, counter = allocate(
                state,
                store.existing_numbers(business_id, series),
                store.exists,
                series,
                self.max_attempts,
                business_id,
            )
            store.save_counter(business_id, counter)
            return number


class MemoryCounterStore:
    """In-process :class:`CounterStore` for single-instance use and tests."""

    def __init__(self) -> None:
        self.states: dict[int, CounterState] = {}
        self.issued: dict[int, set[str]] = {}
        self._mutex = threading.Lock()

    def add_business(self, business_id: int, prefix: str = "INV", counter: int = 0) -> None:
        with self._mutex:
            self.states[business_id] = CounterState(prefix=prefix, counter=counter)
            self.issued.setdefault(business_id, set())

    def record(self, business_id: int, number: str) -> None:
        """Mark ``number`` as used by a persisted invoice."""

        with self._mutex:
            self.issued.setdefault(business_id, set()).add(number)

    def load(self, business_id: int) -> CounterState:
        with self._mutex:
            state = self.states.get(business_id)
            if state is None:
                raise BusinessNotFoundError(business_id)
            return CounterState(prefix=state.prefix, counter=state.counter)

    def existing_numbers(self, business_id: int, series: str) -> Iterable[str]:
        with self._mutex:
            numbers = list(self.issued.get(business_id, ()))
        return [n for n in numbers if n.startswith(series + "-")]

    def exists(self, number: str) -> bool:
        with self._mutex:
            return any(number in numbers for numbers in self.issued.values())

    def save_counter(self, business_id: int, counter: int) -> None:
        with self._mutex:
            self.states[business_id].counter = counter
