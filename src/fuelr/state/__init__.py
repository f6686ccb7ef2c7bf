"""State/store layer.

Merging fetched batches into snapshots, refresh policy, and the single
JSON file a snapshot is persisted to.
"""
