"""HTTP gateway over a PostgreSQL warehouse and a learner tracking store."""

__version__ = "0.1.0"
