"""
Database Base Definition
========================

Defines the SQLAlchemy Declarative Base.

All ORM models must inherit from this Base. Import
``incidentdesk.models`` before touching ``Base.metadata`` so every
table is registered.
"""

from sqlalchemy.orm import declarative_base

# Base class for all database models
Base = declarative_base()
