"""Store Ratings - Backend.

Users register, browse stores and rate them (1-5 stars). Store owners see the
ratings of their store; administrators manage users and stores.

Core concepts:
- Every account is a row in `users` with a role (user | store | admin).
- A store is its own row in `stores`, owned by exactly one `store` user.
- Aggregates (average + count) are always recomputed from `ratings` on read.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
