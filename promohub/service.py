"""Business operations on promotions, built over a repository."""

from __future__ import annotations

from typing import Protocol

from promohub.models import Promotion


class PromotionStore(Protocol):
    """What the service needs from its storage."""

    def create_promotion(self, promo: Promotion) -> Promotion: ...

    def get_all_promotions(self) -> list[Promotion]: ...

    def get_promotion_by_promotion_id(self, promotion_id: str) -> Promotion: ...

    def update_promotion_by_promotion_id(self, promo: Promotion) -> Promotion: ...

    def delete_promotion_by_promotion_id(self, promotion_id: str) -> object: ...


class PromotionService:
    """Promotion operations; errors from the store propagate unchanged."""

    def __init__(self, repository: PromotionStore) -> None:
        self.repository = repository

    def create_promotion(self, promo: Promotion) -> Promotion:
        """Store a new promotion and return it as stored."""
        return self.repository.create_promotion(promo)

    def get_all_promotions(self) -> list[Promotion]:
        """Return every recorded promotion."""
        return self.repository.get_all_promotions()

    def get_promotion_by_promotion_id(self, promotion_id: str) -> Promotion:
        """Return the promotion with this promotion ID."""
        return self.repository.get_promotion_by_promotion_id(promotion_id)

    def update_promotion_by_promotion_id(self, promo: Promotion) -> Promotion:
        """Save changes to an existing promotion and return it."""
        return self.repository.update_promotion_by_promotion_id(promo)

    def delete_promotion_by_promotion_id(self, promotion_id: str) -> None:
        """Delete the promotion with this promotion ID."""
        self.repository.delete_promotion_by_promotion_id(promotion_id)