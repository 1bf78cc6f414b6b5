"""Core configuration, database and Actions helpers."""
