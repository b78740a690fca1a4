"""Errors raised when a promotion record cannot be found."""

from __future__ import annotations


class NotFoundError(LookupError):
    """A record looked up by its numeric primary key does not exist."""

    def __init__(self, message: str, record_id: int) -> None:
        super().__init__(message, record_id)
        self.message = message
        self.record_id = record_id

    def __str__(self) -> str:
        return f"{self.message} with ID {self.record_id:d}"


class PromotionIDNotFoundError(LookupError):
    """A promotion looked up by its promotion ID does not exist."""

    def __init__(self, message: str, promotion_id: str) -> None:
        super().__init__(message, promotion_id)
        self.message = message
        self.promotion_id = promotion_id

    def __str__(self) -> str:
        return f"{self.message} with Promotion ID {self.promotion_id}"