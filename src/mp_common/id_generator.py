"""ID generation for orders.

Two kinds of identifiers:
  - Snowflake-style string IDs for primary keys (orders, order_items).
    Monotonically increasing, so ``ORDER BY id DESC`` is newest-first.
  - Human-readable order numbers: ``ORD-<YYYYMMDDHHMMSS>-<XXXX>``.
    The 4-char suffix only makes collisions unlikely; the orders table
    carries a UNIQUE constraint and the coordinator regenerates on conflict.
"""

import random
import string
import threading
import time
from datetime import datetime

from src.mp_common.datetime_utils import compact_timestamp, utc_now

ORDER_NUMBER_PREFIX = "ORD"
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
_SUFFIX_LENGTH = 4


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_700_000_000_000  # 2023-11-14 approx
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_timestamp_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            ts = self._current_ms()
            if ts == self._last_timestamp_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ts = self._wait_next_ms(ts)
            else:
                self._sequence = 0

            self._last_timestamp_ms = ts
            id_int = (
                ((ts - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(id_int)

    def _current_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_next_ms(self, last_ts: int) -> int:
        ts = self._current_ms()
        while ts <= last_ts:
            ts = self._current_ms()
        return ts


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    """Generate a unique snowflake-style string ID using the module-level default generator."""
    return _default_generator.next_id()


def generate_order_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Build ``ORD-20261018124501-7KQ2``. Not cryptographically unique."""
    moment = now or utc_now()
    chooser = rng or random
    suffix = "".join(chooser.choices(_SUFFIX_ALPHABET, k=_SUFFIX_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{compact_timestamp(moment)}-{suffix}"
