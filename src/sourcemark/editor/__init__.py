"""Source editor commands."""

from sourcemark.editor.comment_toggle import CommentToggle, toggle_line_comment
from sourcemark.editor.selection import CommentToggleCommand, SelectionRestorer

__all__ = [
    "CommentToggle",
    "CommentToggleCommand",
    "SelectionRestorer",
    "toggle_line_comment",
]
