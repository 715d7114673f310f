"""
API route modules.

This package contains subrouters for:
- Auth: register, login, logout, refresh, and current user
- Products, Cart, Checkout, Orders and Payments for the shop
- Inventory, Production and Reports for workshop staff

Routers are included from furniture_api.api.main (under the /api/v1 prefix).
"""
