"""
Domain layer for the signatures queue.

This layer contains:
- Data models (signatures, queue status, results)
- Queue and workflow registry
- Business logic (validation mail pipeline, empty-queue bookkeeping)
"""
