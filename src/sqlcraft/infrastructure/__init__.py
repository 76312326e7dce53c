"""Infrastructure layer: SQL statement construction."""
