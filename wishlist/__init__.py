"""
Wishlist service package.

Provides a FastAPI application over a storage service that switches between
a local key-value store and a remote SQL database at startup.
"""
