"""iCal sync error taxonomy"""

from typing import Optional


class ICalSyncError(Exception):
    """Base class for calendar sync errors"""


class FeedUnavailable(ICalSyncError):
    """A feed could not be fetched or parsed (network, timeout, HTTP status, payload)"""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url
        self.message = message


class InvalidEventDates(ICalSyncError):
    """An event's start or end could not be turned into an instant"""


class ChannelLookupFailure(ICalSyncError):
    """Loading the owner's channels failed; the sync continues without channel inference"""


class PersistenceFailure(ICalSyncError):
    """A booking store read or write failed while syncing a property"""

    def __init__(self, property_id: int, message: str, event_uid: Optional[str] = None):
        super().__init__(message)
        self.property_id = property_id
        self.event_uid = event_uid
        self.message = message
