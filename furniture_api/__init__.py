"""
Furniture shop backend: catalog, cart, checkout with bill-of-materials deduction,
payments and production tracking.
"""
