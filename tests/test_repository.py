import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from promohub.exceptions import PromotionIDNotFoundError
from promohub.models import ZERO_TIME, Promotion
from promohub.repository import PromotionRepository

NOW = datetime(2024, 4, 1, 12, 30, tzinfo=timezone.utc)
START = datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)


def _promotion(promotion_id="cae8651b", **overrides):
    values = dict(
        promotion_id=promotion_id,
        promotion_name="Ramadhan Sale",
        discount_type="percentage",
        discount_value=10.5,
        promotion_start_date=START,
        promotion_end_date=START + timedelta(hours=24),
    )
    values.update(overrides)
    return Promotion(**values)


@pytest.fixture
def repo():
    repository = PromotionRepository(clock=lambda: NOW)
    yield repository
    repository.close()


def test_create_assigns_id_and_timestamps(repo):
    created = repo.create_promotion(_promotion())
    assert created.id > 0
    assert created.created_at == NOW
    assert created.updated_at == NOW
    assert repo.get_promotion_by_promotion_id("cae8651b") == created


def test_create_keeps_given_timestamps(repo):
    created = repo.create_promotion(_promotion(created_at=START))
    assert created.created_at == START
    assert created.updated_at == NOW


def test_create_with_explicit_id(repo):
    created = repo.create_promotion(_promotion(id=42))
    assert created.id == 42
    with pytest.raises(sqlite3.IntegrityError):
        repo.create_promotion(_promotion("other", id=42))


def test_get_all_includes_soft_deleted(repo):
    first = repo.create_promotion(_promotion("a1"))
    second = repo.create_promotion(_promotion("b2", deleted_at=START))
    assert repo.get_all_promotions() == [first, second]


def test_get_all_empty(repo):
    assert repo.get_all_promotions() == []


def test_get_missing_raises(repo):
    with pytest.raises(PromotionIDNotFoundError) as info:
        repo.get_promotion_by_promotion_id("cb7360g6")
    assert info.value.promotion_id == "cb7360g6"


def test_update_writes_all_fields(repo):
    created = repo.create_promotion(_promotion())
    later = lambda: NOW + timedelta(hours=1)  # noqa: E731
    repo._clock = later
    changed = created.merged({"promotion_name": "Winter Sale", "discount_type": "fixed", "discount_value": 15.0})
    updated = repo.update_promotion_by_promotion_id(changed)
    assert updated.updated_at == later()
    assert updated.created_at == created.created_at
    stored = repo.get_promotion_by_promotion_id("cae8651b")
    assert stored == updated
    assert stored.promotion_name == "Winter Sale"
    assert len(repo.get_all_promotions()) == len([created])


def test_update_unknown_promotion_raises(repo):
    repo.create_promotion(_promotion())
    with pytest.raises(PromotionIDNotFoundError, match="cb7360g6"):
        repo.update_promotion_by_promotion_id(_promotion("cb7360g6"))


def test_update_ignores_soft_deleted_rows(repo):
    created = repo.create_promotion(_promotion(deleted_at=START))
    with pytest.raises(PromotionIDNotFoundError):
        repo.update_promotion_by_promotion_id(created)


def test_update_without_id_inserts(repo):
    existing = repo.create_promotion(_promotion())
    saved = repo.update_promotion_by_promotion_id(_promotion(promotion_name="Copy"))
    assert saved.id not in (0, existing.id)
    assert [p.id for p in repo.get_all_promotions()] == [existing.id, saved.id]


def test_delete_removes_rows(repo):
    repo.create_promotion(_promotion())
    assert repo.delete_promotion_by_promotion_id("cae8651b") == 1
    assert repo.get_all_promotions() == []


def test_delete_missing_is_not_an_error(repo):
    repo.create_promotion(_promotion())
    assert repo.delete_promotion_by_promotion_id("cb7360g6") == 0
    assert [p.promotion_id for p in repo.get_all_promotions()] == ["cae8651b"]


def test_unset_dates_survive_storage(repo):
    created = repo.create_promotion(Promotion(promotion_id="z", promotion_name="n", discount_type="t"))
    stored = repo.get_promotion_by_promotion_id("z")
    assert stored.promotion_start_date == ZERO_TIME
    assert stored == created


def test_file_database_persists(tmp_path):
    path = tmp_path / "promotions.db"
    with PromotionRepository(path, clock=lambda: NOW) as repository:
        created = repository.create_promotion(_promotion())
    with PromotionRepository(path) as repository:
        assert repository.get_all_promotions() == [created]


def test_closed_repository_raises():
    repository = PromotionRepository()
    repository.close()
    with pytest.raises(sqlite3.ProgrammingError):
        repository.get_all_promotions()