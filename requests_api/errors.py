class CompositionError(Exception):
    """Raised when the resource graph cannot be composed or realized."""


class NameCollisionError(CompositionError):
    pass


class MissingReferenceError(CompositionError):
    pass


class InvalidNameError(CompositionError):
    pass
