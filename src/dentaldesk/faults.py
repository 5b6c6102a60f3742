"""Pluggable delay and failure policies.

Every artificial suspension and every injected failure in the simulator and
the mock database goes through a ``FaultPolicy``. Production code uses
``RandomFaultPolicy``; tests swap in ``NoFaultPolicy`` or
``ScriptedFaultPolicy`` to run without timers and with controlled outcomes.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable

DEFAULT_FAILURE_RATE = 0.05


class FaultPolicy(ABC):
    """Decides how long simulated work takes and whether it fails."""

    @abstractmethod
    async def pause(self, duration_ms: float) -> None:
        """Suspend the caller for roughly ``duration_ms`` milliseconds."""
        ...

    @abstractmethod
    def latency_ms(self, minimum: float, maximum: float) -> float:
        """Pick a latency in milliseconds within ``[minimum, maximum)``."""
        ...

    @abstractmethod
    def should_fail(self) -> bool:
        """Draw whether the current simulated step fails."""
        ...


class RandomFaultPolicy(FaultPolicy):
    """Uniform random latency and a fixed per-draw failure probability.

    Args:
        failure_rate: Probability that ``should_fail`` returns True.
        time_scale: Multiplier applied to every pause. 0 disables sleeping.
        rng: Random source. Unseeded by default, so outcomes are not
            reproducible unless a seeded ``random.Random`` is passed.
    """

    def __init__(
        self,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        *,
        time_scale: float = 1.0,
        rng: random.Random | None = None,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        if time_scale < 0:
            raise ValueError("time_scale must not be negative")
        self.failure_rate = failure_rate
        self.time_scale = time_scale
        self._rng = rng or random.Random()

    async def pause(self, duration_ms: float) -> None:
        seconds = duration_ms * self.time_scale / 1000
        if seconds > 0:
            await asyncio.sleep(seconds)

    def latency_ms(self, minimum: float, maximum: float) -> float:
        return self._rng.random() * (maximum - minimum) + minimum

    def should_fail(self) -> bool:
        return self._rng.random() < self.failure_rate


class NoFaultPolicy(FaultPolicy):
    """Zero latency, never fails."""

    async def pause(self, duration_ms: float) -> None:
        # Still yield so callers observe the same suspension points.
        await asyncio.sleep(0)

    def latency_ms(self, minimum: float, maximum: float) -> float:
        return 0.0

    def should_fail(self) -> bool:
        return False


class ScriptedFaultPolicy(FaultPolicy):
    """Replays a fixed sequence of failure decisions.

    Once the script is exhausted every further draw succeeds. Requested
    pauses are recorded in ``pauses`` instead of slept.
    """

    def __init__(self, outcomes: Iterable[bool] = ()):
        self._outcomes = list(outcomes)
        self.pauses: list[float] = []
        self.draws = 0

    async def pause(self, duration_ms: float) -> None:
        self.pauses.append(duration_ms)
        await asyncio.sleep(0)

    def latency_ms(self, minimum: float, maximum: float) -> float:
        return minimum

    def should_fail(self) -> bool:
        index = self.draws
        self.draws += 1
        if index < len(self._outcomes):
            return self._outcomes[index]
        return False
