"""Deferred selection restore for editor commands.

After a command rewrites the editor text the text control repaints and
loses its selection; the new selection has to be applied on a later tick.
``SelectionRestorer`` owns that one pending task: scheduling a restore
cancels any restore still waiting, and ``close()`` cancels it on teardown.

``CommentToggleCommand`` ties the pure toggle to the editor's text setter
and the restorer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sourcemark.editor.comment_toggle import (
    DEFAULT_COMMENT_PREFIX,
    CommentToggle,
    toggle_line_comment,
)

logger = logging.getLogger(__name__)

ApplySelection = Callable[[int, int], None]


class SelectionRestorer:
    """Single-owner, cancellable, one-shot selection restore.

    Attributes:
        delay_seconds: Wait before applying; 0 means "next event-loop tick".
    """

    def __init__(self, apply: ApplySelection, delay_seconds: float = 0.0) -> None:
        self._apply = apply
        self.delay_seconds = delay_seconds
        self._pending: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        """Whether a restore is scheduled and has not fired yet."""
        return self._pending is not None and not self._pending.done()

    def schedule(self, start: int, end: int) -> None:
        """Apply ``(start, end)`` later, replacing any restore still pending.

        Must be called from the event loop thread.
        """
        self.cancel()
        loop = asyncio.get_running_loop()

        async def restore() -> None:
            await asyncio.sleep(self.delay_seconds)
            self._apply(start, end)
            logger.debug("[EDITOR] selection restored to %d..%d", start, end)

        self._pending = loop.create_task(restore())

    def cancel(self) -> None:
        """Cancel the pending restore if it has not fired."""
        task = self._pending
        self._pending = None
        if task is not None and not task.done():
            task.cancel()

    def close(self) -> None:
        """Teardown: drop any pending restore."""
        self.cancel()


class CommentToggleCommand:
    """The editor's toggle-comment command.

    Rewrites the text through *set_text* immediately, then restores the
    shifted selection through the restorer once the control has repainted.
    """

    def __init__(
        self,
        set_text: Callable[[str], None],
        restorer: SelectionRestorer,
        prefix: str = DEFAULT_COMMENT_PREFIX,
    ) -> None:
        self._set_text = set_text
        self._restorer = restorer
        self.prefix = prefix

    def run(
        self, raw_text: str, selection_start: int, selection_end: int
    ) -> CommentToggle:
        result = toggle_line_comment(
            raw_text, selection_start, selection_end, prefix=self.prefix
        )
        self._set_text(result.text)
        self._restorer.schedule(result.selection_start, result.selection_end)
        return result

    def close(self) -> None:
        self._restorer.close()
