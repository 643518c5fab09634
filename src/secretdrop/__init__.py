"""One-time secret relay: stores client-encrypted blobs and hands each out once."""

__version__ = "0.1.0"
