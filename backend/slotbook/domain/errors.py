class BookingDomainError(Exception):
    """Base class for every user-facing booking failure."""


class InvalidMobileNumberError(BookingDomainError):
    pass


class MissingNameError(BookingDomainError):
    pass


class SlotNotFoundError(BookingDomainError):
    pass


class SlotUnavailableError(BookingDomainError):
    pass


class InsufficientContiguousAvailabilityError(BookingDomainError):
    pass


class UnsupportedMembersError(BookingDomainError):
    pass


class UnsupportedDurationError(BookingDomainError):
    pass


class InvalidPromoCodeError(BookingDomainError):
    pass


class InvalidPromoDefinitionError(BookingDomainError):
    pass


class DuplicatePromoCodeError(InvalidPromoDefinitionError):
    pass


class InvalidAdminCredentialsError(BookingDomainError):
    pass
