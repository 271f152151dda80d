# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for NoOpErrorStore."""

from datetime import datetime, timezone

from app_errors import DataStoreType, ErrorStatus, NoOpErrorStore, new_unresolved_error


class TestNoOpErrorStore:
    """Tests for NoOpErrorStore."""

    def test_accepts_factory_kwargs(self):
        """Test that unknown keyword arguments are ignored."""
        store = NoOpErrorStore(url="ignored", pool_size=5)

        assert store.data_store_type == DataStoreType.NOT_SHARED

    def test_writes_are_discarded(self):
        """Test that writes return zero and store nothing."""
        store = NoOpErrorStore()

        assert store.insert(new_unresolved_error("x")) == 0
        assert store.insert_or_increment_count(new_unresolved_error("x")) == 0
        assert store.increment_count(1) is None
        assert store.resolve(1) is None
        assert store.resolve_all_unresolved() == 0
        assert store.delete_before(ErrorStatus.RESOLVED, datetime.now(timezone.utc)) == 0

    def test_queries_are_empty(self):
        """Test that queries return nothing."""
        store = NoOpErrorStore()
        now = datetime.now(timezone.utc)

        assert store.get_by_id(1) is None
        assert store.count(ErrorStatus.ALL) == 0
        assert store.count_all() == 0
        assert store.count_resolved() == 0
        assert store.count_unresolved() == 0
        assert store.count_unresolved_since(now) == 0
        assert store.count_unresolved_on_host_since(now, "h", "1.1.1.1") == 0
        assert store.list_page(ErrorStatus.ALL, 1, 10) == []
        assert store.find_unresolved_by_description("x") == []

    def test_never_raises_on_invalid_arguments(self):
        """Test that arguments other stores reject are accepted."""
        store = NoOpErrorStore()

        assert store.list_page(ErrorStatus.ALL, 0, 0) == []
        assert store.insert(new_unresolved_error("x").with_id(4)) == 0
        assert store.delete_before(ErrorStatus.ALL, datetime.now(timezone.utc)) == 0
