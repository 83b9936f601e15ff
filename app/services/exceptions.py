class BookingError(Exception):
    """Base class for battle request workflow errors."""


class InvalidSlot(BookingError):
    pass


class InvalidStatus(BookingError):
    pass


class RequestNotFound(BookingError):
    pass


class SlotConflict(BookingError):
    """The requested date/slot is already held by a pending or confirmed request."""


class InvalidTransition(BookingError):
    pass
