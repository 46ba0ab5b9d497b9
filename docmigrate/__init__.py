"""
Document Migration Tools

One-shot utilities that move legacy documents out of MongoDB, normalize
their fields into canonical entities, and write them into another MongoDB
collection or a MySQL database.

Supports:
- Streaming source documents with per-record decode isolation
- Per-entity transforms for drifted legacy layouts
- Idempotent inserts keyed on natural keys
- Bounded concurrent record pipelines with a run deadline
"""

__version__ = "1.0.0"
