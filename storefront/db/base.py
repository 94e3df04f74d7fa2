# storefront/db/base.py
# Shared declarative base for the SQLAlchemy models.
# Keep this module free of model imports to avoid import cycles;
# models import Base from here.

from sqlalchemy.orm import declarative_base

Base = declarative_base()
