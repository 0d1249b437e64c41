"""
Per-customer write serialization.

Balance updates read the customer's current balance and write a new one, so two
writers on the same customer must not interleave. Within one process the lock
registry below serializes them; across processes the ledger service also takes a
row lock (SELECT ... FOR UPDATE) on databases that support it.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class CustomerLockRegistry:
    """
    One re-entrant lock per customer id, created on first use.

    Locks are never evicted, so the registry holds at most one lock per customer
    this process has written to.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = {}

    def get(self, customer_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(customer_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[customer_id] = lock
            return lock

    @contextmanager
    def hold(self, customer_id: int) -> Iterator[None]:
        lock = self.get(customer_id)
        with lock:
            yield


# Global registry instance
customer_locks = CustomerLockRegistry()


def customer_lock(customer_id: int):
    """Context manager serializing balance mutations for one customer."""
    return customer_locks.hold(customer_id)
