"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .tech_category import TechCategory  # noqa: E402,F401
from .tech_solution import TechSolution  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "TechCategory",
    "TechSolution",
]
