"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area (users,
catalog, inventory, cart, orders, production) and share the AsyncSession
handed in by the request dependency.
"""
