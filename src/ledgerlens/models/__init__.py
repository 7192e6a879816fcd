"""Data models — input snapshots and typed reports."""
