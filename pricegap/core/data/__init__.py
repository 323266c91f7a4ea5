"""Data access: schema, storage, repositories and providers."""
