# slate/slate_random.py
from __future__ import annotations

import logging
import math
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

# --------------------------------------------------
# LCG parameters (glibc). Pinned: changing any of these
# changes every seeded experiment.
# --------------------------------------------------

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 2147483648  # 2**31

DEFAULT_SEED = 12345


class SlateLcgArithmetic(str, Enum):
    """
    How the LCG step is evaluated.

    - EXACT   => arbitrary precision integers:
                 state = (A * state + C) mod M, exactly.
    - FLOAT64 => the same recurrence evaluated in IEEE doubles, the way a
                 browser evaluates it. A * state overflows 2**53 once state
                 grows, so the sequences drift apart from EXACT after a few
                 draws. Use this to replay a stream recorded in the browser.
    """

    EXACT = "exact"
    FLOAT64 = "float64"


class SlateRandom:
    """
    Seeded pseudo-random generator (linear congruential).

        state_{n+1} = (1103515245 * state_n + 12345) mod 2**31
        uniform     = state_{n+1} / 2**31             in [0, 1)

    Gaussian samples use Box-Muller on two uniform draws:

        u = 1 - uniform()    (in (0, 1], so ln(u) is finite)
        v = uniform()
        z = sqrt(-2 ln u) * cos(2 pi v)

    Two instances seeded with the same value produce identical sequences.
    Each draw advances and reads the state under a lock, so sharing one
    instance across threads gives an undefined interleaving but never a
    torn state.
    """

    def __init__(
        self,
        seed: int = DEFAULT_SEED,
        arithmetic: str | SlateLcgArithmetic = SlateLcgArithmetic.EXACT,
    ) -> None:
        self.arithmetic = SlateLcgArithmetic(arithmetic)
        self._lock = threading.Lock()
        self._state = self._normalize_seed(seed)

    # ------------------------------------------------------
    # Seeding
    # ------------------------------------------------------
    @staticmethod
    def _normalize_seed(value) -> int:
        # Any integer is accepted; negatives and huge values wrap into [0, M).
        return int(value) % LCG_MODULUS

    def seed(self, value: int) -> None:
        """Reset the internal state to `value`."""
        state = self._normalize_seed(value)
        with self._lock:
            self._state = state
        logger.debug("SlateRandom reseeded: value=%r state=%d", value, state)

    def set_seed(self, value: int) -> None:
        self.seed(value)

    @property
    def state(self) -> int:
        return self._state

    # ------------------------------------------------------
    # Draws
    # ------------------------------------------------------
    def _advance(self, state: int) -> int:
        if self.arithmetic is SlateLcgArithmetic.FLOAT64:
            return int(math.fmod(float(LCG_MULTIPLIER) * float(state) + float(LCG_INCREMENT),
                                 float(LCG_MODULUS)))
        return (LCG_MULTIPLIER * state + LCG_INCREMENT) % LCG_MODULUS

    def next_uniform(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        with self._lock:
            self._state = self._advance(self._state)
            state = self._state
        return state / LCG_MODULUS

    def next_gaussian(self) -> float:
        """Standard normal sample (mean 0, std 1) via Box-Muller."""
        u = 1.0 - self.next_uniform()
        v = self.next_uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)

    def __repr__(self) -> str:
        return f"SlateRandom(state={self._state}, arithmetic={self.arithmetic.value!r})"


# --------------------------------------------------
# Context-scoped generator
# --------------------------------------------------

_current_rng: ContextVar[Optional[SlateRandom]] = ContextVar("slate_current_rng", default=None)


def current_rng() -> SlateRandom:
    """
    Return the generator bound to the current context.

    Every thread (and every asyncio task started from a fresh context) gets
    its own lazily-created generator, seeded with DEFAULT_SEED, so independent
    call sites do not consume each other's draws.
    """
    rng = _current_rng.get()
    if rng is None:
        rng = SlateRandom()
        _current_rng.set(rng)
    return rng


@contextmanager
def use_rng(rng: SlateRandom) -> Iterator[SlateRandom]:
    """
    Bind `rng` as the current generator for the duration of a block:

        with use_rng(SlateRandom(7)):
            w = slate_np.random_normal(3, 3)
    """
    token = _current_rng.set(rng)
    try:
        yield rng
    finally:
        _current_rng.reset(token)
