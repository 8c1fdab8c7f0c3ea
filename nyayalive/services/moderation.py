"""Keyword blocklist applied to typed chat messages."""

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_BLOCKLIST = ('inappropriate', 'offensive', 'harmful')


class ContentModerator:
    """Case-insensitive substring blocklist."""

    def __init__(self, blocklist: Optional[Iterable[str]] = None):
        self.blocklist = tuple(word.lower() for word in (blocklist or DEFAULT_BLOCKLIST))

    def check(self, text: str) -> bool:
        """Return True if ``text`` is acceptable."""
        lowered = text.lower()
        for word in self.blocklist:
            if word in lowered:
                logger.warning(f"Content moderation triggered for word: {word}")
                return False
        return True
