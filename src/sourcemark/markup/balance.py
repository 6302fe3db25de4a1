"""Keep an inserted highlight wrapper well-nested inside highlighter markup.

A highlight that opens inside ``<span class="k">`` and closes after its
``</span>`` would produce crossing tags.  ``balance_mark`` moves the mark's
boundaries until the wrapped slice is tag-balanced:

- an element closed inside the mark but opened before it pulls the mark's
  start back to its opening tag;
- an element opened inside the mark but closed after it pushes the mark's
  end past its closing tag;
- when the partner tag is not on this line at all (a token the highlighter
  split across lines), the mark shrinks to exclude the unpaired tag instead.

Scanning follows the same backwards/forwards depth counting used to find
enclosing elements in serialised HTML.
"""

from __future__ import annotations

import logging
from typing import Literal

from sourcemark.markup.tokenizer import Tag, find_text_runs, iter_tags, tag_at

logger = logging.getLogger(__name__)


def _first_unbalanced(
    tags: list[Tag], start: int, end: int
) -> tuple[Literal["closer", "opener"], int] | None:
    """Find the first tag inside ``[start, end)`` that has no partner inside it.

    Returns ``(kind, index_into_tags)`` or None when the slice is balanced.
    """
    stack: list[int] = []
    for idx, tag in enumerate(tags):
        if tag.start < start:
            continue
        if tag.end > end:
            break
        if not tag.closing:
            stack.append(idx)
        elif stack and tags[stack[-1]].name == tag.name:
            stack.pop()
        else:
            return "closer", idx
    if stack:
        # Outermost first so a single widening covers nested openers too.
        return "opener", stack[0]
    return None


def _matching_opener(tags: list[Tag], closer_idx: int) -> Tag | None:
    name = tags[closer_idx].name
    depth = 0
    for tag in reversed(tags[:closer_idx]):
        if tag.name != name:
            continue
        if tag.closing:
            depth += 1
        elif depth == 0:
            return tag
        else:
            depth -= 1
    return None


def _matching_closer(tags: list[Tag], opener_idx: int) -> Tag | None:
    name = tags[opener_idx].name
    depth = 0
    for tag in tags[opener_idx + 1 :]:
        if tag.name != name:
            continue
        if not tag.closing:
            depth += 1
        elif depth == 0:
            return tag
        else:
            depth -= 1
    return None


def balance_mark(line: str, start: int, end: int) -> tuple[int, int] | None:
    """Adjust ``[start, end)`` so that ``line[start:end]`` is tag-balanced.

    Returns the adjusted offsets, or None when nothing with visible text is
    left to wrap.
    """
    start = max(start, 0)
    end = min(end, len(line))

    # Offsets that landed inside a tag snap outward to its boundary.
    inner = tag_at(line, start)
    if inner is not None:
        start = inner.start
    inner = tag_at(line, end)
    if inner is not None:
        end = inner.end

    tags = [tag for tag in iter_tags(line) if not tag.self_closing]

    for _ in range(2 * len(tags) + 1):
        if start >= end:
            return None
        problem = _first_unbalanced(tags, start, end)
        if problem is None:
            if not find_text_runs(line[start:end]):
                return None
            return start, end

        kind, idx = problem
        tag = tags[idx]
        if kind == "closer":
            opener = _matching_opener(tags, idx)
            start = opener.start if opener is not None else tag.end
        else:
            closer = _matching_closer(tags, idx)
            end = closer.end if closer is not None else tag.start

    logger.debug("[HIGHLIGHT] could not balance mark %d..%d in %r", start, end, line)
    return None
