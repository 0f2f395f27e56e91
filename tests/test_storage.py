"""
Tests for storage backends and transaction support
"""

import json
import pytest
from unittest.mock import patch

from demo_banking.storage import InMemoryStorage, JSONFileStorage, create_storage
from demo_banking.exceptions import StorageError


test_data = {
    "id": "record_1",
    "name": "Test Record",
    "amount": "100.50",
}


class TestInMemoryStorage:
    """Test the in-memory backend"""
    
    def test_basic_operations(self):
        """Test basic CRUD operations"""
        storage = InMemoryStorage()
        
        storage.save("test_table", "record_1", test_data)
        assert storage.load("test_table", "record_1") == test_data
        assert storage.exists("test_table", "record_1")
        assert not storage.exists("test_table", "missing")
        
        storage.save("test_table", "record_2", {"id": "record_2", "name": "Other"})
        assert storage.count("test_table") == 2
        assert [r["id"] for r in storage.load_all("test_table")] == ["record_1", "record_2"]
        
        assert storage.delete("test_table", "record_1")
        assert not storage.delete("test_table", "record_1")
        assert storage.load("test_table", "record_1") is None
        
        storage.clear_table("test_table")
        assert storage.count("test_table") == 0
    
    def test_find_with_filters(self):
        storage = InMemoryStorage()
        storage.save("users", "1", {"id": "1", "email": "a@example.com", "status": "Active"})
        storage.save("users", "2", {"id": "2", "email": "b@example.com", "status": "Pending"})
        storage.save("users", "3", {"id": "3", "email": "c@example.com", "status": "Active"})
        
        active = storage.find("users", {"status": "Active"})
        assert [r["id"] for r in active] == ["1", "3"]
        assert storage.find("users", {"status": "Active", "email": "c@example.com"})[0]["id"] == "3"
        assert storage.find("users", {"missing_key": "x"}) == []
        assert len(storage.find("users", {})) == 3
    
    def test_returned_records_are_copies(self):
        """Mutating a loaded record does not change stored data"""
        storage = InMemoryStorage()
        storage.save("t", "1", {"id": "1", "tags": ["a"]})
        
        loaded = storage.load("t", "1")
        loaded["tags"].append("b")
        
        assert storage.load("t", "1")["tags"] == ["a"]
    
    def test_atomic_commit(self):
        storage = InMemoryStorage()
        with storage.atomic():
            storage.save("t", "1", {"id": "1"})
            storage.save("u", "2", {"id": "2"})
        
        assert storage.exists("t", "1")
        assert storage.exists("u", "2")
    
    def test_atomic_rollback_restores_all_tables(self):
        storage = InMemoryStorage()
        storage.save("t", "keep", {"id": "keep", "value": 1})
        
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("t", "keep", {"id": "keep", "value": 2})
                storage.save("t", "new", {"id": "new"})
                storage.delete("t", "keep")
                raise RuntimeError("boom")
        
        assert storage.load("t", "keep") == {"id": "keep", "value": 1}
        assert not storage.exists("t", "new")
    
    def test_nested_atomic_joins_outer(self):
        """An inner block's writes are undone when the outer block fails"""
        storage = InMemoryStorage()
        
        with pytest.raises(ValueError):
            with storage.atomic():
                with storage.atomic():
                    storage.save("t", "inner", {"id": "inner"})
                raise ValueError("outer failure")
        
        assert not storage.exists("t", "inner")
    
    def test_storage_usable_after_rollback(self):
        storage = InMemoryStorage()
        with pytest.raises(KeyError):
            with storage.atomic():
                raise KeyError("x")
        
        with storage.atomic():
            storage.save("t", "1", {"id": "1"})
        assert storage.count("t") == 1


class TestJSONFileStorage:
    """Test the flat-file backend"""
    
    def test_collection_written_as_array(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        storage.save("users", "1", {"id": "1", "name": "Alice"})
        storage.save("users", "2", {"id": "2", "name": "Bob"})
        
        with open(tmp_path / "users.json") as fh:
            contents = json.load(fh)
        
        assert contents == [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]
    
    def test_reload_from_disk(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        storage.save("receipts", "r1", {"id": "r1", "amount": "10.00"})
        
        reopened = JSONFileStorage(tmp_path)
        assert reopened.load("receipts", "r1") == {"id": "r1", "amount": "10.00"}
        assert reopened.count("receipts") == 1
    
    def test_missing_collection_is_empty(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        assert storage.load_all("transactions") == []
        assert not (tmp_path / "transactions.json").exists()
    
    def test_transaction_defers_writes_until_commit(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        
        with storage.atomic():
            storage.save("users", "1", {"id": "1"})
            assert not (tmp_path / "users.json").exists()
        
        assert (tmp_path / "users.json").exists()
    
    def test_rollback_leaves_files_untouched(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        storage.save("users", "1", {"id": "1", "balance": "5.00"})
        
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("users", "1", {"id": "1", "balance": "0.00"})
                storage.save("transactions", "t1", {"id": "t1"})
                raise RuntimeError("receipt write failed")
        
        assert storage.load("users", "1")["balance"] == "5.00"
        assert JSONFileStorage(tmp_path).load("users", "1")["balance"] == "5.00"
        assert not (tmp_path / "transactions.json").exists()
    
    def test_failed_write_removes_temp_file(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        
        with patch("demo_banking.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                storage.save("users", "1", {"id": "1"})
        
        assert list(tmp_path.iterdir()) == []
        assert storage.count("users") == 0
    
    def test_failed_commit_removes_temp_file(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        
        with patch("demo_banking.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                with storage.atomic():
                    storage.save("users", "1", {"id": "1"})
        
        assert list(tmp_path.iterdir()) == []
        storage.save("users", "2", {"id": "2"})
        assert [p.name for p in tmp_path.iterdir()] == ["users.json"]
    
    def test_corrupt_collection_raises_storage_error(self, tmp_path):
        (tmp_path / "users.json").write_text("{not json")
        storage = JSONFileStorage(tmp_path)
        
        with pytest.raises(StorageError):
            storage.load_all("users")
    
    def test_non_array_collection_rejected(self, tmp_path):
        (tmp_path / "users.json").write_text('{"id": "1"}')
        storage = JSONFileStorage(tmp_path)
        
        with pytest.raises(StorageError):
            storage.load("users", "1")


class TestCreateStorage:
    
    def test_backends_by_name(self, tmp_path):
        assert isinstance(create_storage("memory"), InMemoryStorage)
        assert isinstance(create_storage("json", tmp_path), JSONFileStorage)
    
    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage("postgres")
