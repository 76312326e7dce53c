"""
sqlcraft - Fluent SQL builders and a random-access result cursor.

Builders render SQL text in memory; the cursor layer executes it through
SQLAlchemy and caches rows by position.
"""

__version__ = "0.1.0"
