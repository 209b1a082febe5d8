"""Persistence gateway and unit of work tests."""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from framework.exceptions.errors import DuplicateError, PersistenceError
from apps.catalog.models import Category, Product


class TestBaseRepository:
    """Generic repository operations."""

    @pytest.mark.asyncio
    async def test_get_by_id_missing_returns_none(self, uow):
        assert await uow.categories.get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_add_is_staged_until_save(self, uow):
        await uow.categories.add(Category(name="Books"))
        assert await uow.categories.count() == 1  # autoflush inside the session

        await uow.rollback()
        assert await uow.categories.get_all() == []

    @pytest.mark.asyncio
    async def test_add_and_save_returns_affected_count(self, uow):
        await uow.categories.add(Category(name="Books"))
        await uow.categories.add(Category(name="Toys"))

        affected = await uow.save()

        assert affected == 2
        names = [c.name for c in await uow.categories.get_all()]
        assert names == ["Books", "Toys"]

    @pytest.mark.asyncio
    async def test_find_with_expression_and_filters(self, uow, sample_products, sample_category):
        cheap = await uow.products.find(Product.price < Decimal("30"))
        assert {p.name for p in cheap} == {"Wireless Mouse", "USB-C Cable"}

        by_name = await uow.products.find(name="Mechanical Keyboard", category_id=sample_category.id)
        assert len(by_name) == 1

    @pytest.mark.asyncio
    async def test_find_rejects_unknown_column(self, uow):
        with pytest.raises(AttributeError):
            await uow.categories.find(colour="red")

    @pytest.mark.asyncio
    async def test_single_or_default(self, uow, sample_products, sample_category):
        assert await uow.products.single_or_default(Product.name == "Nope") is None
        single = await uow.products.single_or_default(Product.name == "USB-C Cable")
        assert single.id == sample_products[2].id

        with pytest.raises(PersistenceError):
            await uow.products.single_or_default(Product.category_id == sample_category.id)

    @pytest.mark.asyncio
    async def test_update_refreshes_timestamp(self, uow, sample_category):
        category = await uow.categories.get_by_id(sample_category.id)
        stale = datetime(2000, 1, 1, tzinfo=timezone.utc)
        category.updated_at = stale
        category.name = "Consumer Electronics"

        await uow.categories.update(category)
        affected = await uow.save()

        assert affected == 1
        assert category.updated_at > stale
        reloaded = await uow.categories.get_by_name("Consumer Electronics")
        assert reloaded is not None

    @pytest.mark.asyncio
    async def test_delete(self, uow, sample_category):
        category = await uow.categories.get_by_id(sample_category.id)
        await uow.categories.delete(category)

        assert await uow.save() == 1
        assert await uow.categories.get_by_id(sample_category.id) is None


class TestUnitOfWork:
    """Save semantics, constraint translation and explicit transactions."""

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_duplicate_error(self, uow, sample_category):
        # Skips the service pre-check, as a concurrent request would
        await uow.categories.add(Category(name=sample_category.name))

        with pytest.raises(DuplicateError) as exc_info:
            await uow.save()
        assert "unique" in str(exc_info.value.detail).lower()

        # Session is usable again after the rollback
        assert await uow.categories.count() == 1

    @pytest.mark.asyncio
    async def test_commit_transaction_makes_saves_durable(self, uow):
        await uow.begin_transaction()
        assert uow.in_transaction
        await uow.categories.add(Category(name="Garden"))
        await uow.save()
        await uow.categories.add(Category(name="Kitchen"))
        await uow.save()
        await uow.commit_transaction()

        assert not uow.in_transaction
        await uow.rollback()
        assert await uow.categories.count() == 2

    @pytest.mark.asyncio
    async def test_rollback_transaction_discards_saves(self, uow):
        await uow.begin_transaction()
        await uow.categories.add(Category(name="Garden"))
        await uow.save()
        await uow.rollback_transaction()

        assert await uow.categories.count() == 0

    @pytest.mark.asyncio
    async def test_begin_twice_is_rejected(self, uow):
        await uow.begin_transaction()
        with pytest.raises(PersistenceError):
            await uow.begin_transaction()
        await uow.rollback_transaction()

    @pytest.mark.asyncio
    async def test_commit_and_rollback_without_transaction_are_noops(self, uow):
        await uow.commit_transaction()
        await uow.rollback_transaction()
        assert not uow.in_transaction

    @pytest.mark.asyncio
    async def test_dispose_rolls_back_open_transaction(self, uow):
        await uow.begin_transaction()
        await uow.categories.add(Category(name="Garden"))
        await uow.save()

        await uow.dispose()

        assert not uow.in_transaction
        assert await uow.categories.count() == 0

    @pytest.mark.asyncio
    async def test_context_manager_disposes(self, async_session):
        from apps.unit_of_work import InventoryUnitOfWork

        async with InventoryUnitOfWork(session=async_session) as scoped:
            await scoped.categories.add(Category(name="Sports"))
            await scoped.save()

        check = InventoryUnitOfWork(session=async_session)
        assert await check.categories.get_by_name("Sports") is not None

    def test_session_is_required(self):
        from framework.repository.unit_of_work import UnitOfWork

        with pytest.raises(ValueError):
            UnitOfWork()
