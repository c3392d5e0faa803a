"""Technical indicators: a batch RSI plus rolling (incremental) estimators.

The rolling indicators consume one price at a time and keep bounded
state. None of them raise on odd input: an undefined reading is
reported as ``None`` and callers check ``is_ready`` / ``value``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from decimal import Decimal

ZERO = Decimal(0)
HUNDRED = Decimal(100)
NEUTRAL_RSI = Decimal(50)
# Seed used by RollingRSI.reset_to_neutral(): equal averages read as RSI 50.
NEUTRAL_SEED = Decimal("0.01")

Number = Decimal | int | float


def _dec(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _rsi_from_averages(avg_gain: Decimal, avg_loss: Decimal) -> Decimal:
    if avg_gain == 0 and avg_loss == 0:
        return NEUTRAL_RSI
    if avg_loss == 0:
        return HUNDRED
    if avg_gain == 0:
        return ZERO
    rs = avg_gain / avg_loss
    return HUNDRED - HUNDRED / (1 + rs)


def rsi(closes: Sequence[Number], period: int = 14) -> Decimal | None:
    """Relative Strength Index (Wilder's smoothing) over a fixed series.

    Returns a Decimal in [0, 100] or None if there are fewer than
    ``period + 1`` data points. A flat series reads 50.
    """
    if len(closes) < period + 1:
        return None

    prices = [_dec(c) for c in closes]
    deltas = [prices[i] - prices[i - 1] for i in range(1, len(prices))]

    # Seed with simple average of first *period* changes
    gains = [d if d > 0 else ZERO for d in deltas]
    losses = [-d if d < 0 else ZERO for d in deltas]
    avg_gain = sum(gains[:period], ZERO) / period
    avg_loss = sum(losses[:period], ZERO) / period

    # Wilder smoothing over remaining deltas
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    return _rsi_from_averages(avg_gain, avg_loss)


class RollingRSI:
    """Incremental Wilder RSI.

    Warms up until ``period`` price changes are seen, then seeds the
    average gain/loss with their simple mean and applies Wilder's
    recurrence on every later change. Keeps at most ``period + 1``
    prices and ``period`` gain/loss samples.
    """

    def __init__(self, period: int = 14) -> None:
        if period < 1:
            raise ValueError(f"RSI period must be >= 1, got {period}")
        self.period = period
        self._prices: deque[Decimal] = deque(maxlen=period + 1)
        self._gains: deque[Decimal] = deque(maxlen=period)
        self._losses: deque[Decimal] = deque(maxlen=period)
        self.avg_gain = ZERO
        self.avg_loss = ZERO
        self.initialized = False

    def add_price(self, price: Number) -> None:
        price = _dec(price)
        previous = self._prices[-1] if self._prices else None
        self._prices.append(price)
        if previous is None:
            return

        change = price - previous
        gain = change if change > 0 else ZERO
        loss = -change if change < 0 else ZERO
        self._gains.append(gain)
        self._losses.append(loss)

        if not self.initialized:
            if len(self._gains) >= self.period:
                self.avg_gain = sum(self._gains, ZERO) / self.period
                self.avg_loss = sum(self._losses, ZERO) / self.period
                self.initialized = True
        else:
            self.avg_gain = (self.avg_gain * (self.period - 1) + gain) / self.period
            self.avg_loss = (self.avg_loss * (self.period - 1) + loss) / self.period

    @property
    def is_ready(self) -> bool:
        return self.initialized

    @property
    def value(self) -> Decimal | None:
        if not self.initialized:
            return None
        return _rsi_from_averages(self.avg_gain, self.avg_loss)

    def reset_to_neutral(self) -> None:
        """Drop history and read 50 immediately, before any real samples."""
        self._prices.clear()
        self._gains.clear()
        self._losses.clear()
        self.avg_gain = NEUTRAL_SEED
        self.avg_loss = NEUTRAL_SEED
        self.initialized = True


class RollingMACD:
    """Incremental MACD line with an optional signal line.

    Both EMAs are seeded with the SMA of the first ``slow_period`` prices
    rather than the first price, which avoids a large opening swing.
    """

    def __init__(
        self,
        fast_period: int = 12,
        slow_period: int = 26,
        signal_period: int | None = None,
    ) -> None:
        if fast_period < 1 or slow_period < 1:
            raise ValueError("MACD periods must be >= 1")
        if signal_period is not None and signal_period < 1:
            raise ValueError(f"MACD signal period must be >= 1, got {signal_period}")
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period
        self._alpha_fast = Decimal(2) / (fast_period + 1)
        self._alpha_slow = Decimal(2) / (slow_period + 1)
        self._alpha_signal = Decimal(2) / (signal_period + 1) if signal_period else None

        self._prices: deque[Decimal] = deque(maxlen=slow_period)
        self._macd_history: deque[Decimal] = deque(
            maxlen=(signal_period or 0) + 1
        )
        self.ema_fast = ZERO
        self.ema_slow = ZERO
        self.signal_line = ZERO
        self.initialized = False
        self.signal_initialized = False

    def add_price(self, price: Number) -> None:
        price = _dec(price)
        if not self.initialized:
            self._prices.append(price)
            if len(self._prices) < self.slow_period:
                return
            sma = sum(self._prices, ZERO) / len(self._prices)
            self.ema_fast = sma
            self.ema_slow = sma
            self.initialized = True
        else:
            self.ema_fast += self._alpha_fast * (price - self.ema_fast)
            self.ema_slow += self._alpha_slow * (price - self.ema_slow)

        if self.signal_period is not None:
            self._update_signal(self.ema_fast - self.ema_slow)

    def _update_signal(self, macd_value: Decimal) -> None:
        self._macd_history.append(macd_value)
        if self.signal_initialized:
            self.signal_line += self._alpha_signal * (macd_value - self.signal_line)
        elif len(self._macd_history) >= self.signal_period:
            self.signal_line = sum(self._macd_history, ZERO) / len(self._macd_history)
            self.signal_initialized = True

    @property
    def is_ready(self) -> bool:
        return self.initialized

    @property
    def value(self) -> Decimal | None:
        """The MACD line (fast EMA minus slow EMA)."""
        if not self.initialized:
            return None
        return self.ema_fast - self.ema_slow

    @property
    def signal(self) -> Decimal | None:
        if self.signal_period is None or not self.signal_initialized:
            return None
        return self.signal_line

    def reset_to_neutral(self) -> None:
        """Zero both EMAs and mark ready (and signal-ready when configured)."""
        self._prices.clear()
        self._macd_history.clear()
        self.ema_fast = ZERO
        self.ema_slow = ZERO
        self.signal_line = ZERO
        self.initialized = True
        self.signal_initialized = self.signal_period is not None


class RollingMomentum:
    """Percent change between the newest price and the one ``period`` steps back."""

    def __init__(self, period: int = 10) -> None:
        if period < 1:
            raise ValueError(f"Momentum period must be >= 1, got {period}")
        self.period = period
        self._window: deque[Decimal] = deque(maxlen=period + 1)

    def add_price(self, price: Number) -> None:
        self._window.append(_dec(price))

    @property
    def is_ready(self) -> bool:
        return len(self._window) == self.period + 1

    @property
    def value(self) -> Decimal | None:
        if not self.is_ready:
            return None
        past = self._window[0]
        if past == 0:
            return None
        return (self._window[-1] - past) / past * HUNDRED

    def reset(self) -> None:
        self._window.clear()
