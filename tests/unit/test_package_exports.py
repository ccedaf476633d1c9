"""Tests for package-level exports."""

from __future__ import annotations


class TestPackageExports:
    """Test cases for top-level package imports."""

    def test_import_components(self) -> None:
        """Core components should be importable from catalog_store."""
        from catalog_store import BatchWriter, PaginatedScanner, StatusUpdater

        assert BatchWriter is not None
        assert PaginatedScanner is not None
        assert StatusUpdater is not None

    def test_import_store_protocol(self) -> None:
        from catalog_store import InMemoryStore, StoreClient

        assert isinstance(InMemoryStore(), StoreClient)

    def test_all_exports_match_declared(self) -> None:
        """All items in __all__ should be importable."""
        import catalog_store

        for name in catalog_store.__all__:
            assert hasattr(catalog_store, name), f"{name} not found in catalog_store"
