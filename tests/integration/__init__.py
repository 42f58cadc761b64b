"""
Integration tests.

These tests talk to a real store and run only when ``USE_REAL_REDIS=1``;
the address comes from ``KVPIPE_ADDRESS`` (default ``localhost:6379``).
"""
