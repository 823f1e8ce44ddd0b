from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

# 2020-01-01 00:00:00 UTC+8
DEFAULT_EPOCH_MS = 1577808000000


class SnowflakeError(Exception):
    pass


class InvalidConfiguration(SnowflakeError, ValueError):
    pass


class ClockMovedBackwards(SnowflakeError, RuntimeError):
    def __init__(self, last_timestamp_ms: int, current_timestamp_ms: int) -> None:
        self.last_timestamp_ms = last_timestamp_ms
        self.current_timestamp_ms = current_timestamp_ms
        self.offset_ms = last_timestamp_ms - current_timestamp_ms
        super().__init__(
            f"Clock moved backwards. Refusing to generate id for {self.offset_ms} milliseconds"
        )


@dataclass(frozen=True)
class SnowflakeLayout:
    """Bit partition of an id, most to least significant.

    One sign bit (always 0), then timestamp, data center id, node id and
    sequence. The widths must add up to 64.
    """

    timestamp_bits: int = 41
    data_center_id_bits: int = 5
    node_id_bits: int = 5
    sequence_bits: int = 12

    def __post_init__(self) -> None:
        if self.timestamp_bits < 1 or self.sequence_bits < 1:
            raise InvalidConfiguration("timestamp_bits and sequence_bits must be at least 1")
        if self.data_center_id_bits < 0 or self.node_id_bits < 0:
            raise InvalidConfiguration("id widths can't be negative")
        total = 1 + self.timestamp_bits + self.data_center_id_bits + self.node_id_bits + self.sequence_bits
        if total != 64:
            raise InvalidConfiguration(f"layout must cover exactly 64 bits, got {total}")

    @property
    def max_node_id(self) -> int:
        return (1 << self.node_id_bits) - 1

    @property
    def max_data_center_id(self) -> int:
        return (1 << self.data_center_id_bits) - 1

    @property
    def sequence_mask(self) -> int:
        return (1 << self.sequence_bits) - 1

    @property
    def timestamp_mask(self) -> int:
        return (1 << self.timestamp_bits) - 1

    @property
    def node_id_shift(self) -> int:
        return self.sequence_bits

    @property
    def data_center_id_shift(self) -> int:
        return self.sequence_bits + self.node_id_bits

    @property
    def timestamp_shift(self) -> int:
        return self.sequence_bits + self.node_id_bits + self.data_center_id_bits


DEFAULT_LAYOUT = SnowflakeLayout()


@dataclass(frozen=True)
class SnowflakeParts:
    timestamp_ms: int
    data_center_id: int
    node_id: int
    sequence: int

    @property
    def datetime(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp_ms / 1000, tz=timezone.utc)

    def to_dict(self) -> Dict[str, int]:
        return {
            "timestamp_ms": self.timestamp_ms,
            "data_center_id": self.data_center_id,
            "node_id": self.node_id,
            "sequence": self.sequence,
        }


def parse_id(
    snowflake_id: int,
    *,
    epoch_ms: int = DEFAULT_EPOCH_MS,
    layout: SnowflakeLayout = DEFAULT_LAYOUT,
) -> SnowflakeParts:
    if snowflake_id < 0 or snowflake_id.bit_length() > 63:
        raise ValueError(f"{snowflake_id} is not a valid snowflake id")
    return SnowflakeParts(
        timestamp_ms=((snowflake_id >> layout.timestamp_shift) & layout.timestamp_mask) + epoch_ms,
        data_center_id=(snowflake_id >> layout.data_center_id_shift) & layout.max_data_center_id,
        node_id=(snowflake_id >> layout.node_id_shift) & layout.max_node_id,
        sequence=snowflake_id & layout.sequence_mask,
    )


def _current_time_ms() -> int:
    return time.time_ns() // 1_000_000


def _check_bounds(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value < 0 or value > maximum:
        raise InvalidConfiguration(f"{name} can't be greater than {maximum} or less than 0")


class IdWorker:
    """Thread-safe Snowflake id generator for one node.

    Keep a single instance per ``(data_center_id, node_id)`` for the life of
    the process; ids are only guaranteed monotonic within one instance.
    """

    def __init__(
        self,
        node_id: int,
        data_center_id: int,
        *,
        epoch_ms: int = DEFAULT_EPOCH_MS,
        layout: SnowflakeLayout = DEFAULT_LAYOUT,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        _check_bounds("node_id", node_id, layout.max_node_id)
        _check_bounds("data_center_id", data_center_id, layout.max_data_center_id)
        if isinstance(epoch_ms, bool) or not isinstance(epoch_ms, int) or epoch_ms < 0:
            raise InvalidConfiguration(f"epoch_ms must be a non-negative integer, got {epoch_ms!r}")
        self._node_id = node_id
        self._data_center_id = data_center_id
        self._epoch_ms = epoch_ms
        self._layout = layout
        self._clock = clock or _current_time_ms
        self._lock = threading.Lock()
        self._last_ts = -1
        self._sequence = 0

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def data_center_id(self) -> int:
        return self._data_center_id

    @property
    def epoch_ms(self) -> int:
        return self._epoch_ms

    @property
    def layout(self) -> SnowflakeLayout:
        return self._layout

    @property
    def last_timestamp_ms(self) -> int:
        return self._last_ts

    @property
    def sequence(self) -> int:
        return self._sequence

    def next(self) -> int:
        layout = self._layout
        with self._lock:
            now = self._clock()
            # ids minted before the epoch would carry a negative timestamp field
            if now < self._epoch_ms:
                raise ClockMovedBackwards(self._epoch_ms, now)
            if now < self._last_ts:
                raise ClockMovedBackwards(self._last_ts, now)
            if now == self._last_ts:
                self._sequence = (self._sequence + 1) & layout.sequence_mask
                if self._sequence == 0:
                    now = self._wait_next_ms(self._last_ts)
            else:
                self._sequence = 0
            self._last_ts = now
            return (
                ((now - self._epoch_ms) << layout.timestamp_shift)
                | (self._data_center_id << layout.data_center_id_shift)
                | (self._node_id << layout.node_id_shift)
                | self._sequence
            )

    def next_id_str(self) -> str:
        return str(self.next())

    def parse(self, snowflake_id: int) -> SnowflakeParts:
        return parse_id(snowflake_id, epoch_ms=self._epoch_ms, layout=self._layout)

    def _wait_next_ms(self, last_ts: int) -> int:
        now = self._clock()
        while now <= last_ts:
            time.sleep(0)
            now = self._clock()
        return now


_workers: Dict[Tuple[int, int], IdWorker] = {}
_workers_lock = threading.Lock()


def get_worker(node_id: int = 0, data_center_id: int = 0) -> IdWorker:
    key = (node_id, data_center_id)
    worker = _workers.get(key)
    if worker is None:
        with _workers_lock:
            worker = _workers.get(key)
            if worker is None:
                worker = IdWorker(node_id, data_center_id)
                _workers[key] = worker
    return worker


def next_id(node_id: int = 0, data_center_id: int = 0) -> int:
    return get_worker(node_id, data_center_id).next()
