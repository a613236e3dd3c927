"""Error types shared by the trainer core, repositories and routers."""


class TrainerError(Exception):
    """Base class for errors raised by the trainer."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(TrainerError):
    """Raised when a referenced record (card, user) does not exist."""


class InvalidInputError(TrainerError):
    """Raised when the caller supplied a value the trainer cannot act on."""


class StoreUnavailableError(TrainerError):
    """Raised when the backing store cannot be reached or fails a request."""


class ProgressConflictError(TrainerError):
    """Raised when a concurrent write changed progress between read and write."""
