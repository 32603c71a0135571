"""SQLAlchemy-backed repository helpers.

Each helper takes a :class:`~sqlalchemy.orm.Session` as its first argument and
scopes every query to one business.
"""
