"""Markup emitted by the highlight renderer.

The class names come from ``HighlightConfig``; these templates only fix the
element shape so the renderer and the marked-text extraction agree.

Used by markup/render.py (render_line, extract_marked_text).
"""

from __future__ import annotations

# Format: <span class="{class}">{1-based line number}</span>
LINE_NUMBER_TEMPLATE = '<span class="{}">{}</span>'
# Format: <span class="{class}">...active span...</span>
MARKER_OPEN_TEMPLATE = '<span class="{}">'
MARKER_CLOSE = "</span>"
