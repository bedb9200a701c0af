"""Deals module -- data models, filters, aggregation, and repository for the dashboard report.

Provides SQLAlchemy models (Organization, Account, Deal), Pydantic schemas
(filters, read models, the nested report), composable filter clauses, pure
Decimal aggregation, and DealRepository for async reads.
"""
