"""State/store layer.

This package owns the local record store, its persistent slot, and the
rules for merging imported snapshots into it.
"""
