"""bulkfs - Parallel bulk remove, copy and move for large directory trees."""

__version__ = "0.1.0"
