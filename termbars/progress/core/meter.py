"""
Rate Meter Module

Throughput estimation over a sliding sampling window.
"""

import logging
import time
from collections import deque
from threading import RLock
from typing import Deque, List, Optional, Tuple

logger = logging.getLogger(__name__)


class RateMeter:
    """
    Measures progress throughput.

    Keeps a bounded history of (timestamp, amount) samples. The live rate
    only considers samples inside the sampling interval, the mean rate
    covers everything since start().
    """

    def __init__(self, interval: float = 1.0, max_samples: Optional[int] = None, max_rates: Optional[int] = None) -> None:
        """
        Initialize a rate meter.

        Args:
            interval: Sampling window in seconds
            max_samples: Bound of the sample history (defaults to global config)
            max_rates: Number of per-interval rates to remember (defaults to global config)
        """
        from termbars.progress.config import get_config
        config = get_config()

        self.interval = interval
        self._lock = RLock()
        self._max_samples = max_samples or config.max_samples
        self._samples: Deque[Tuple[float, float]] = deque(maxlen=self._max_samples)
        self._rates: Deque[float] = deque(maxlen=max_rates or config.max_rates)
        self._start_time = time.time()
        self._last_rate_time = self._start_time
        self._last_sample_time = self._start_time
        self._total = 0.0

    def start(self) -> None:
        """Reset the window anchor to now."""
        with self._lock:
            self._start_time = time.time()
            self._last_rate_time = self._start_time
            self._last_sample_time = self._start_time

    def sample(self, at: float, amount: float) -> None:
        """
        Record progress made at a point in time.

        Args:
            at: Timestamp of the sample (as returned by time.time())
            amount: Progress made since the previous sample
        """
        with self._lock:
            self._total += amount
            self._samples.append((at, amount))
            self._last_sample_time = max(self._last_sample_time, at)
            self._prune(at)

            if at - self._last_rate_time >= self.interval:
                self._rates.append(self.rate)
                self._last_rate_time = at

    def _prune(self, at: float) -> None:
        cutoff = at - self.interval
        while self._samples and self._samples[0][0] < cutoff:
            self._samples.popleft()

    @property
    def rate(self) -> float:
        """Throughput over the live sampling window."""
        with self._lock:
            if not self._samples:
                return 0
            last_at = self._last_sample_time
            window_start = max(self._start_time, last_at - self.interval)
            elapsed = last_at - window_start
            if elapsed <= 0:
                return 0
            amount = sum(value for at, value in self._samples if at >= window_start)
            return max(0.0, amount / elapsed)

    @property
    def mean_rate(self) -> float:
        """Throughput since start() regardless of the window."""
        with self._lock:
            elapsed = self._last_sample_time - self._start_time
            if elapsed <= 0:
                return 0
            return max(0.0, self._total / elapsed)

    @property
    def rates(self) -> List[float]:
        """Rates recorded at each elapsed interval followed by the live rate."""
        with self._lock:
            return list(self._rates) + [self.rate]

    def clear(self) -> None:
        """Reset all accumulated state."""
        with self._lock:
            self._samples.clear()
            self._rates.clear()
            self._total = 0.0
            self._start_time = time.time()
            self._last_rate_time = self._start_time
            self._last_sample_time = self._start_time

    def __repr__(self) -> str:
        return f"RateMeter(interval={self.interval}, samples={len(self._samples)})"
