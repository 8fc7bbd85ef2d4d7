"""Session logging and output."""

from scoutbook.logging.markdown_writer import MarkdownSessionWriter
from scoutbook.logging.session_log import SessionLog

__all__ = ["MarkdownSessionWriter", "SessionLog"]
