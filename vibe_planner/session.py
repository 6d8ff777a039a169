"""One planning session: the store plus everything that feeds it or renders from it."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional, Union

from vibe_planner.actions import LoadWishlist, ResetAll
from vibe_planner.config import Settings
from vibe_planner.logging_utils import get_logger
from vibe_planner.persistence import load_wishlist, save_wishlist
from vibe_planner.store import TripState, TripStore
from vibe_planner.surfaces import ChatSurface
from vibe_planner.sync.buffer import StreamingResultBuffer
from vibe_planner.sync.map_adapter import MapChatSyncAdapter
from vibe_planner.sync.scheduler import ReconciliationScheduler
from vibe_planner.sync.transcript import Transcript, TranscriptDeduplicator

logger = get_logger(__name__)


class PlanningSession:
    """
    Wires the chat stream, the map and wishlist storage around a single
    :class:`TripStore`.

    ``mount`` must be called from inside a running event loop (it starts the
    reconciliation task); ``unmount`` tears everything down again and drops
    any results still buffered.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        chat_surface: Optional[ChatSurface] = None,
        transcript: Optional[Transcript] = None,
        wishlist_path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.wishlist_path = Path(wishlist_path) if wishlist_path is not None else self.settings.wishlist_path
        self.chat_surface = chat_surface

        self.store = TripStore(max_chat_results=self.settings.chat_results_cap)
        self.buffer = StreamingResultBuffer(cap=self.settings.buffer_cap)
        self.scheduler = ReconciliationScheduler(
            self.buffer,
            self.store.dispatch,
            interval=self.settings.reconcile_interval,
        )
        self.transcript = transcript if transcript is not None else Transcript()
        self.deduplicator = TranscriptDeduplicator(self.transcript)
        self.map = MapChatSyncAdapter(self.store, chat_surface)

        self._unsubscribe = self.store.subscribe(self._persist_wishlist)
        self._mounted = False
        self._restoring = False

    @property
    def state(self) -> TripState:
        return self.store.state

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        if self._mounted:
            return
        items = load_wishlist(self.wishlist_path)
        if items:
            self._restoring = True
            try:
                self.store.dispatch(LoadWishlist(items=tuple(items)))
            finally:
                self._restoring = False
            logger.info("Restored %d wishlist item(s) from %s", len(items), self.wishlist_path)
        self.scheduler.start()
        self.deduplicator.attach()
        self._mounted = True

    def unmount(self) -> None:
        if not self._mounted:
            return
        self.scheduler.stop()
        self.deduplicator.detach()
        self._mounted = False

    def close(self) -> None:
        self.unmount()
        self._unsubscribe()

    # ------- chat stream -------
    def on_turn_started(self) -> None:
        self.buffer.begin_turn()

    def on_result_emitted(self, candidate: Any) -> bool:
        """A destination card rendered in the chat stream."""
        return self.buffer.add(candidate)

    def on_tool_output(self, hits: Iterable[Any]) -> bool:
        """The full hit list of a search tool call."""
        return self.buffer.write_hits(hits)

    def suggest(self, query: str) -> bool:
        """Send a prompt chip or "ask about" query into the chat widget."""
        query = query.strip()
        if not query or self.chat_surface is None:
            return False
        self.chat_surface.submit_query(query)
        return True

    def clear_conversation(self) -> None:
        self.buffer.begin_turn()
        self.store.dispatch(ResetAll())

    # ------- storage -------
    def _persist_wishlist(self, previous: TripState, current: TripState) -> None:
        if self._restoring or previous.wishlist == current.wishlist:
            return
        save_wishlist(current.wishlist, self.wishlist_path)
