class MtreeError(Exception):
    """Base class for mtree writer errors."""


# Protocol order
class SequencingError(MtreeError):
    """An operation was called out of header/data/finish order."""


class SessionFailedError(MtreeError):
    """The session hit a fatal error earlier and can only be closed."""


# Sink
class SinkWriteError(MtreeError):
    pass
