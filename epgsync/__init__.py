"""EPG Sync: multi-provider EPG fetch and normalization."""

__version__ = "0.1.0"
