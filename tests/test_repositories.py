"""Tests for the customer directory and ledger store repositories."""
import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import AutoReconnect, DuplicateKeyError

from creditbook.core.errors import (
    AlreadyRepaidError,
    RecordFetchError,
    RecordNotFoundError,
    RosterFetchError,
    StoreReadError,
    ValidationError,
    WriteError,
)
from creditbook.repositories.customer_repo import CustomerRepository
from creditbook.repositories.item_repo import ItemRepository
from creditbook.repositories.ledger_repo import AdvanceRepository, DebtRepository


@pytest.mark.asyncio
class TestCustomerRepository:

    async def test_list_customers_in_creation_order(self, memory_db):
        repo = CustomerRepository(memory_db)
        for name in ["Zed", "Amy", "Kim"]:
            await repo.create_customer(name)

        roster = await repo.list_customers()

        assert [c.name for c in roster] == ["Zed", "Amy", "Kim"]

    async def test_list_customers_sort_order(self, mock_db):
        await CustomerRepository(mock_db).list_customers()

        mock_db.customers.find.return_value.sort.assert_called_once_with([("created_at", 1), ("_id", 1)])

    async def test_list_customers_failure(self, mock_db):
        mock_db.customers.find.return_value.to_list.side_effect = AutoReconnect("lost")

        with pytest.raises(RosterFetchError):
            await CustomerRepository(mock_db).list_customers()

    async def test_create_customer_strips_name(self, memory_db):
        customer = await CustomerRepository(memory_db).create_customer("  Alice  ")

        assert customer.name == "Alice"
        assert memory_db.customers.docs[0]["name"] == "Alice"

    async def test_create_customer_blank_name(self, mock_db):
        with pytest.raises(ValidationError):
            await CustomerRepository(mock_db).create_customer("   ")

        mock_db.customers.insert_one.assert_not_called()

    async def test_create_customer_write_failure(self, mock_db):
        mock_db.customers.insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(WriteError):
            await CustomerRepository(mock_db).create_customer("Alice")

    async def test_get_customer_invalid_id(self, mock_db):
        assert await CustomerRepository(mock_db).get_customer("nope") is None
        mock_db.customers.find_one.assert_not_called()

    async def test_update_customer_renames(self, memory_db):
        repo = CustomerRepository(memory_db)
        customer = await repo.create_customer("Alice")

        renamed = await repo.update_customer(str(customer.id), "  Alicia ")

        assert renamed.id == customer.id
        assert renamed.name == "Alicia"
        assert (await repo.get_customer(str(customer.id))).name == "Alicia"

    async def test_update_customer_blank_name(self, mock_db):
        with pytest.raises(ValidationError):
            await CustomerRepository(mock_db).update_customer(str(ObjectId()), " ")

        mock_db.customers.find_one_and_update.assert_not_called()

    async def test_update_customer_missing(self, mock_db):
        assert await CustomerRepository(mock_db).update_customer(str(ObjectId()), "Bob") is None
        assert await CustomerRepository(mock_db).update_customer("nope", "Bob") is None

    async def test_update_customer_write_failure(self, mock_db):
        mock_db.customers.find_one_and_update.side_effect = AutoReconnect("lost")

        with pytest.raises(WriteError):
            await CustomerRepository(mock_db).update_customer(str(ObjectId()), "Bob")


@pytest.mark.asyncio
class TestLedgerRepository:

    async def test_list_for_customer_queries_by_customer(self, mock_db):
        customer_id = ObjectId()
        mock_db.debts.find.return_value.to_list.return_value = [{
            "_id": ObjectId(),
            "customer_id": customer_id,
            "line_items": [{"name": "Rice", "cost": 4}],
            "total_cost": 4,
            "repaid": False,
        }]

        debts = await DebtRepository(mock_db).list_for_customer(str(customer_id))

        mock_db.debts.find.assert_called_once_with({"customer_id": customer_id})
        assert len(debts) == 1
        assert debts[0].total_cost == 4

    async def test_list_for_customer_store_failure(self, mock_db):
        mock_db.advances.find.return_value.to_list.side_effect = AutoReconnect("lost")
        customer_id = str(ObjectId())

        with pytest.raises(RecordFetchError) as exc_info:
            await AdvanceRepository(mock_db).list_for_customer(customer_id)

        assert exc_info.value.customer_id == customer_id
        assert isinstance(exc_info.value.cause, AutoReconnect)

    async def test_list_for_customer_malformed_document(self, mock_db):
        mock_db.advances.find.return_value.to_list.return_value = [{"_id": ObjectId(), "amount": "lots"}]

        with pytest.raises(RecordFetchError):
            await AdvanceRepository(mock_db).list_for_customer(str(ObjectId()))

    async def test_list_for_customer_invalid_id(self, mock_db):
        with pytest.raises(RecordFetchError):
            await DebtRepository(mock_db).list_for_customer("not-an-object-id")

    async def test_list_all_store_failure(self, mock_db):
        mock_db.debts.find.return_value.to_list.side_effect = AutoReconnect("lost")

        with pytest.raises(StoreReadError):
            await DebtRepository(mock_db).list_all()

    async def test_list_all_malformed_document(self, mock_db):
        mock_db.advances.find.return_value.to_list.return_value = [{"_id": ObjectId(), "amount": "lots"}]

        with pytest.raises(StoreReadError):
            await AdvanceRepository(mock_db).list_all()

    async def test_get_store_failure(self, mock_db):
        mock_db.debts.find_one.side_effect = AutoReconnect("lost")

        with pytest.raises(StoreReadError):
            await DebtRepository(mock_db).get(str(ObjectId()))

    async def test_get_malformed_document(self, mock_db):
        mock_db.debts.find_one.return_value = {"_id": ObjectId(), "total_cost": "n/a"}

        with pytest.raises(StoreReadError):
            await DebtRepository(mock_db).get(str(ObjectId()))

    async def test_get_invalid_id(self, mock_db):
        assert await AdvanceRepository(mock_db).get("xyz") is None
        mock_db.advances.find_one.assert_not_called()

    async def test_create_write_failure(self, mock_db):
        from creditbook.models.ledger import build_advance_record

        mock_db.advances.insert_one.side_effect = AutoReconnect("lost")
        advance = build_advance_record(str(ObjectId()), 10)

        with pytest.raises(WriteError):
            await AdvanceRepository(mock_db).create(advance)

    async def test_mark_repaid_conditional_update(self, mock_db):
        debt_id = ObjectId()
        mock_db.debts.find_one_and_update.return_value = {
            "_id": debt_id,
            "customer_id": ObjectId(),
            "line_items": [{"name": "Rice", "cost": 4}],
            "total_cost": 4,
            "repaid": True,
        }

        debt = await DebtRepository(mock_db).mark_repaid(str(debt_id))

        assert debt.repaid is True
        query, update = mock_db.debts.find_one_and_update.call_args[0]
        assert query == {"_id": debt_id, "repaid": {"$ne": True}}
        assert update["$set"]["repaid"] is True
        assert "repaid_at" in update["$set"]
        assert mock_db.debts.find_one_and_update.call_args[1]["return_document"] == ReturnDocument.AFTER

    async def test_mark_repaid_already_repaid(self, mock_db):
        debt_id = ObjectId()
        mock_db.debts.find_one.return_value = {"_id": debt_id, "repaid": True}

        with pytest.raises(AlreadyRepaidError):
            await DebtRepository(mock_db).mark_repaid(str(debt_id))

    async def test_mark_repaid_missing(self, mock_db):
        with pytest.raises(RecordNotFoundError):
            await DebtRepository(mock_db).mark_repaid(str(ObjectId()))

    async def test_mark_repaid_invalid_id(self, mock_db):
        with pytest.raises(RecordNotFoundError):
            await AdvanceRepository(mock_db).mark_repaid("xyz")

        mock_db.advances.find_one_and_update.assert_not_called()

    async def test_mark_repaid_store_failure(self, mock_db):
        mock_db.advances.find_one_and_update.side_effect = AutoReconnect("lost")

        with pytest.raises(WriteError):
            await AdvanceRepository(mock_db).mark_repaid(str(ObjectId()))


@pytest.mark.asyncio
class TestItemRepository:

    async def test_create_and_list_by_name(self, memory_db):
        repo = ItemRepository(memory_db)
        await repo.create_item("Sugar", 40, 55)
        await repo.create_item(" Flour ", 30, 30)

        catalogue = await repo.list_items()

        assert [i.name for i in catalogue] == ["Flour", "Sugar"]
        assert catalogue[0].min_price == catalogue[0].max_price == 30

    async def test_list_sort_order(self, mock_db):
        await ItemRepository(mock_db).list_items()

        mock_db.items.find.return_value.sort.assert_called_once_with([("name", 1), ("_id", 1)])

    async def test_list_failure(self, mock_db):
        mock_db.items.find.return_value.to_list.side_effect = AutoReconnect("lost")

        with pytest.raises(StoreReadError):
            await ItemRepository(mock_db).list_items()

    @pytest.mark.parametrize("name, min_price, max_price", [
        ("", 1, 2),
        ("Rice", -1, 2),
        ("Rice", 1, -2),
        ("Rice", 5, 2),
        ("Rice", float("inf"), float("inf")),
    ])
    async def test_create_rejects_invalid(self, mock_db, name, min_price, max_price):
        with pytest.raises(ValidationError):
            await ItemRepository(mock_db).create_item(name, min_price, max_price)

        mock_db.items.insert_one.assert_not_called()

    async def test_create_write_failure(self, mock_db):
        mock_db.items.insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(WriteError):
            await ItemRepository(mock_db).create_item("Rice", 1, 2)

    async def test_update_item(self, memory_db):
        repo = ItemRepository(memory_db)
        item = await repo.create_item("Rice", 10, 12)

        updated = await repo.update_item(str(item.id), "Basmati rice", 14, 18)

        assert updated.id == item.id
        assert (updated.name, updated.min_price, updated.max_price) == ("Basmati rice", 14, 18)
        assert (await repo.get_item(str(item.id))).max_price == 18

    async def test_update_rejects_inverted_range(self, mock_db):
        with pytest.raises(ValidationError):
            await ItemRepository(mock_db).update_item(str(ObjectId()), "Rice", 9, 3)

        mock_db.items.find_one_and_update.assert_not_called()

    async def test_update_missing(self, mock_db):
        assert await ItemRepository(mock_db).update_item(str(ObjectId()), "Rice", 1, 2) is None
        assert await ItemRepository(mock_db).update_item("nope", "Rice", 1, 2) is None

    async def test_get_invalid_id(self, mock_db):
        assert await ItemRepository(mock_db).get_item("nope") is None
        mock_db.items.find_one.assert_not_called()
