"""Holding area for city results streamed by the chat surface.

The chat widget re-renders its tool output many times while a turn streams,
and each render hands us the same hits again. Nothing here touches the store:
the buffer only tracks the latest unique result set and a version counter,
and :class:`~vibe_planner.sync.scheduler.ReconciliationScheduler` decides when
that set is pushed into shared state.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from vibe_planner.config import DEFAULT_BUFFER_CAP
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import City

logger = get_logger(__name__)


def _coerce_city(candidate: Any) -> Optional[City]:
    if isinstance(candidate, City):
        return candidate
    try:
        return City.model_validate(candidate)
    except ValidationError as exc:
        logger.debug("Dropping malformed streamed result: %s", exc.errors()[:1])
        return None


class StreamingResultBuffer:
    def __init__(self, cap: int = DEFAULT_BUFFER_CAP) -> None:
        if cap < 1:
            raise ValueError("buffer cap must be at least 1")
        self.cap = cap
        self._cities: Tuple[City, ...] = ()
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> Tuple[City, ...]:
        return self._cities

    def add(self, candidate: Any) -> bool:
        """Merge one streamed result into the running set.

        Returns ``True`` when the set changed (and the version advanced).
        Duplicates by case-insensitive name, malformed payloads and results
        arriving once the carousel is full leave the buffer untouched.
        """
        city = _coerce_city(candidate)
        if city is None:
            return False
        merged = self._merge(self._cities, [city])
        return self._replace(merged)

    def write_hits(self, hits: Iterable[Any]) -> bool:
        """Overwrite the running set with the hits of one render of the tool output.

        A render without any usable hit (the widget's loading pass) is ignored.
        """
        cities = [city for city in (_coerce_city(hit) for hit in hits or []) if city is not None]
        if not cities:
            return False
        return self._replace(self._merge((), cities))

    def begin_turn(self) -> None:
        """Forget the previous turn's results.

        The version is left alone so the results already on screen stay
        there until the new turn produces something.
        """
        self._cities = ()

    def _merge(self, current: Tuple[City, ...], incoming: List[City]) -> Tuple[City, ...]:
        merged = list(current)
        seen = {city.name_key for city in merged}
        for city in incoming:
            if len(merged) >= self.cap:
                break
            if city.name_key in seen:
                continue
            seen.add(city.name_key)
            merged.append(city)
        return tuple(merged)

    def _replace(self, cities: Tuple[City, ...]) -> bool:
        if cities == self._cities:
            return False
        self._cities = cities
        self._version += 1
        return True
