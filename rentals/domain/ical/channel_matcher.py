from typing import Iterable, Optional

from ...models import Channel


def match_channel(feed_name: Optional[str], channels: Iterable[Channel]) -> Optional[Channel]:
    """
    Guess the sales channel of a feed from its display name.

    A channel matches when either name contains the other (case-insensitive).
    The first match in `channels` order wins. Blank names never match, so an
    unnamed channel cannot swallow every feed.
    """
    source = (feed_name or "").strip().lower()
    if not source:
        return None

    for channel in channels:
        name = (channel.name or "").strip().lower()
        if not name:
            continue
        if name in source or source in name:
            return channel
    return None
