"""Arrays, queues, stacks, vectors, hash maps and heaps whose access pattern hides which element is touched."""

__version__ = "0.1.0a3"

__all__ = ["array", "queue", "stack", "vector", "unsorted_map", "heap", "sharded_map"]