"""
Service layer: checkout transaction, payments, production tracking and analytics.
"""
