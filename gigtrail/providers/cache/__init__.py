"""Cache providers.

MemoryCacheProvider keeps aggregated performance results in process memory
with a per-entry TTL.  It is not shared across processes; a multi-worker
deployment would need another ICacheProvider implementation.
"""
