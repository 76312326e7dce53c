"""Database I/O."""
