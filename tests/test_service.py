from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from promohub.models import Promotion
from promohub.repository import PromotionRepository
from promohub.service import PromotionService


def _promotion():
    now = datetime.now(timezone.utc)
    return Promotion(
        promotion_id="cae8651b",
        promotion_name="Ramadhan Sale",
        discount_type="percentage",
        discount_value=10.5,
        promotion_start_date=now,
        promotion_end_date=now + timedelta(hours=24),
    )


@pytest.fixture
def repo():
    return Mock(spec=PromotionRepository)


@pytest.fixture
def service(repo):
    return PromotionService(repo)


def test_create_promotion_success(repo, service):
    expected = _promotion()
    repo.create_promotion.return_value = expected
    assert service.create_promotion(expected) == expected
    repo.create_promotion.assert_called_once_with(expected)


def test_create_promotion_error(repo, service):
    repo.create_promotion.side_effect = RuntimeError("failed to create promotion")
    with pytest.raises(RuntimeError, match="failed to create promotion"):
        service.create_promotion(_promotion())
    repo.create_promotion.assert_called_once()


def test_get_all_promotions_success(repo, service):
    expected = [_promotion()]
    repo.get_all_promotions.return_value = expected
    assert service.get_all_promotions() == expected
    repo.get_all_promotions.assert_called_once_with()


def test_get_all_promotions_error(repo, service):
    repo.get_all_promotions.side_effect = RuntimeError("Failed to Get Promotions")
    with pytest.raises(RuntimeError, match="Failed to Get Promotions"):
        service.get_all_promotions()
    repo.get_all_promotions.assert_called_once_with()


def test_get_promotion_by_promotion_id_success(repo, service):
    expected = _promotion()
    repo.get_promotion_by_promotion_id.return_value = expected
    assert service.get_promotion_by_promotion_id("cae8651b") == expected
    repo.get_promotion_by_promotion_id.assert_called_once_with("cae8651b")


def test_get_promotion_by_promotion_id_not_found(repo, service):
    repo.get_promotion_by_promotion_id.side_effect = LookupError("Promotion not Found")
    with pytest.raises(LookupError, match="Promotion not Found"):
        service.get_promotion_by_promotion_id("cb7360g6")
    repo.get_promotion_by_promotion_id.assert_called_once_with("cb7360g6")


def test_update_promotion_success(repo, service):
    updated = replace(_promotion(), promotion_name="Winter Sale", discount_type="fixed", discount_value=15.0)
    repo.update_promotion_by_promotion_id.return_value = updated
    assert service.update_promotion_by_promotion_id(updated) == updated
    repo.update_promotion_by_promotion_id.assert_called_once_with(updated)


def test_update_promotion_error(repo, service):
    updated = replace(_promotion(), promotion_name="Winter Sale", discount_type="fixed", discount_value=15.0)
    repo.update_promotion_by_promotion_id.side_effect = RuntimeError("Failed to Update Promotion")
    with pytest.raises(RuntimeError, match="Failed to Update Promotion"):
        service.update_promotion_by_promotion_id(updated)
    repo.update_promotion_by_promotion_id.assert_called_once_with(updated)


def test_delete_promotion_success(repo, service):
    repo.delete_promotion_by_promotion_id.return_value = 1
    assert service.delete_promotion_by_promotion_id("cb7360g6") is None
    repo.delete_promotion_by_promotion_id.assert_called_once_with("cb7360g6")


def test_delete_promotion_not_found(repo, service):
    repo.delete_promotion_by_promotion_id.side_effect = LookupError("Promotion Not Found")
    with pytest.raises(LookupError, match="Promotion Not Found"):
        service.delete_promotion_by_promotion_id("cb7360g6")
    repo.delete_promotion_by_promotion_id.assert_called_once_with("cb7360g6")


def test_service_over_real_repository():
    with PromotionRepository() as repository:
        service = PromotionService(repository)
        created = service.create_promotion(_promotion())
        assert service.get_promotion_by_promotion_id("cae8651b") == created
        service.delete_promotion_by_promotion_id("cae8651b")
        assert service.get_all_promotions() == []