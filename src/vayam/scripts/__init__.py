"""Operational scripts (migrations, database bootstrap, development tokens)."""
