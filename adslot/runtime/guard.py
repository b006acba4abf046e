"""
adslot.runtime.guard — one atomic unit per externally invoked operation.

`CallGuard.call(op, env)` wraps a market operation:

  1. reject the call if another operation is already in flight (re-entrancy
     from a payout hook, or a concurrent thread) with ReentrantCall;
  2. reject attached value on non-payable operations (IncorrectDeposit);
  3. open a journal checkpoint and move `env.value` from caller to the pool;
  4. run the operation body;
  5. commit on success, revert on any exception.

The lock is per market, not per Ad: a single in-flight call at a time. It is
acquired non-blocking, so no operation ever waits.

    with guard.call("rent", env, payable=True):
        ...
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ..errors import AdSlotError, IncorrectDeposit, ReentrantCall
from ..state.journal import Journal
from .context import CallEnv
from .treasury import Treasury

log = logging.getLogger(__name__)


class CallGuard:
    def __init__(self, journal: Journal, treasury: Treasury) -> None:
        self._journal = journal
        self._treasury = treasury
        self._lock = threading.Lock()
        self._in_flight: Optional[str] = None

    @property
    def in_flight(self) -> Optional[str]:
        return self._in_flight

    @contextmanager
    def call(self, op: str, env: CallEnv, *, payable: bool = False) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ReentrantCall(op=op, in_flight=self._in_flight)
        try:
            if env.value and not payable:
                raise IncorrectDeposit("operation does not accept value", op=op, value=env.value)
            self._in_flight = op
            marker = self._journal.begin()
            try:
                self._treasury.receive(env.sender, env.value)
                yield
            except AdSlotError as e:
                self._journal.revert_to(marker)
                log.info("%s reverted: %s", op, e.code)
                raise
            except BaseException:
                self._journal.revert_to(marker)
                log.exception("%s reverted on unexpected error", op)
                raise
            self._journal.commit()
        finally:
            self._in_flight = None
            self._lock.release()


__all__ = ["CallGuard"]
