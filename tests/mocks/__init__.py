from tests.mocks.mock_catalog import InMemoryProductStore, StaticCatalogSource

__all__ = ["InMemoryProductStore", "StaticCatalogSource"]
