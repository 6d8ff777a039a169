"""Presentation-layer guard against duplicated turns in the chat transcript.

The chat widget owns its transcript and, while re-rendering a streaming
answer, can commit the same assistant turn twice. :class:`Transcript` models
the widget's rendered container as an observable list of turn nodes, and
:class:`TranscriptDeduplicator` watches it and removes repeated
role+content siblings after every committed mutation batch. None of this
touches the trip store.
"""
from __future__ import annotations

import contextlib
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Iterable, Iterator, List, Literal, Optional, Tuple

from vibe_planner.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(eq=False)
class TranscriptNode:
    # role is None for chrome such as loaders or the scroll anchor
    role: Optional[str]
    content: str = ""
    node_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def signature(self) -> Optional[Tuple[str, str]]:
        text = self.content.strip()
        if not self.role or not text:
            return None
        return self.role, text


@dataclass(frozen=True)
class MutationRecord:
    kind: Literal["added", "removed", "changed"]
    nodes: Tuple[TranscriptNode, ...]


MutationCallback = Callable[[List[MutationRecord], "Transcript"], None]


class Observation:
    def __init__(self, transcript: "Transcript", callback: MutationCallback) -> None:
        self._transcript = transcript
        self.callback = callback

    @property
    def connected(self) -> bool:
        return self in self._transcript._observers

    def disconnect(self) -> None:
        if self.connected:
            self._transcript._observers.remove(self)


class Transcript:
    """Ordered container of rendered turn nodes that reports mutation batches."""

    def __init__(self, nodes: Iterable[TranscriptNode] = ()) -> None:
        self._nodes: List[TranscriptNode] = list(nodes)
        self._observers: List[Observation] = []
        self._batch: Optional[List[MutationRecord]] = None
        self._queued: Deque[List[MutationRecord]] = deque()
        self._notifying = False

    @property
    def nodes(self) -> Tuple[TranscriptNode, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def observe(self, callback: MutationCallback) -> Observation:
        observation = Observation(self, callback)
        self._observers.append(observation)
        return observation

    @contextlib.contextmanager
    def batch(self) -> Iterator[None]:
        """Group mutations so observers see them as one committed render."""
        if self._batch is not None:
            yield
            return
        self._batch = []
        try:
            yield
        finally:
            records, self._batch = self._batch, None
            if records:
                self._deliver(records)

    def append(self, *nodes: TranscriptNode) -> None:
        if not nodes:
            return
        self._nodes.extend(nodes)
        self._record(MutationRecord("added", tuple(nodes)))

    def remove(self, node: TranscriptNode) -> bool:
        for index, existing in enumerate(self._nodes):
            if existing is node:
                del self._nodes[index]
                self._record(MutationRecord("removed", (node,)))
                return True
        return False

    def update(self, node: TranscriptNode, content: str) -> None:
        node.content = content
        self._record(MutationRecord("changed", (node,)))

    def _record(self, record: MutationRecord) -> None:
        if self._batch is not None:
            self._batch.append(record)
        else:
            self._deliver([record])

    def _deliver(self, records: List[MutationRecord]) -> None:
        self._queued.append(records)
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._queued:
                pending = self._queued.popleft()
                for observation in list(self._observers):
                    if observation.connected:
                        observation.callback(pending, self)
        finally:
            self._notifying = False


def deduplicate_messages(transcript: Transcript) -> int:
    """Remove every turn node whose role+content repeats an earlier sibling.

    Returns the number of nodes removed.
    """
    seen = set()
    duplicates: List[TranscriptNode] = []
    for node in transcript.nodes:
        signature = node.signature
        if signature is None:
            continue
        if signature in seen:
            duplicates.append(node)
        else:
            seen.add(signature)
    if not duplicates:
        return 0
    with transcript.batch():
        for node in duplicates:
            transcript.remove(node)
    return len(duplicates)


class TranscriptDeduplicator:
    def __init__(self, transcript: Transcript) -> None:
        self.transcript = transcript
        self.removed_total = 0
        self._observation: Optional[Observation] = None

    @property
    def attached(self) -> bool:
        return self._observation is not None and self._observation.connected

    def attach(self) -> None:
        if self.attached:
            return
        self._observation = self.transcript.observe(self._on_mutations)
        self._sweep()

    def detach(self) -> None:
        if self._observation is not None:
            self._observation.disconnect()
            self._observation = None

    def _on_mutations(self, records: List[MutationRecord], transcript: Transcript) -> None:
        if all(record.kind == "removed" for record in records):
            return
        self._sweep()

    def _sweep(self) -> None:
        removed = deduplicate_messages(self.transcript)
        if removed:
            self.removed_total += removed
            logger.info("Removed %d duplicate transcript turn(s)", removed)
