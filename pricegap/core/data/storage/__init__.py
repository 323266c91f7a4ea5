"""DuckDB storage helpers."""

from pricegap.core.data.storage.duckdb_factory import DuckDBFactoryConfig, PriceGapDuckDBFactory

__all__ = ["DuckDBFactoryConfig", "PriceGapDuckDBFactory"]
