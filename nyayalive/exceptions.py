"""Exception types raised by Nyaya Live."""


class NyayaLiveError(Exception):
    """Base class for Nyaya Live errors."""


class PermissionDenied(NyayaLiveError, PermissionError):
    """The microphone could not be opened (declined or not present)."""


class LiveConnectionError(NyayaLiveError):
    """The remote live session could not be opened or failed mid-stream."""
