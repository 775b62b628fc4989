"""Tech solution category model."""

import uuid
from datetime import datetime
from typing import Optional

from . import db
from .tech_solution import TechSolution
from .user import password_hasher

MIN_CATEGORY_PASSWORD_LENGTH = 6


class TechCategory(db.Model):
    """Groups tech solutions; may be locked behind a shared password."""

    __tablename__ = "tech_categories"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(120), unique=True, nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    icon = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(32), nullable=True)
    order = db.Column("sort_order", db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_protected = db.Column(db.Boolean, nullable=False, default=False)
    password_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    solutions = db.relationship(
        "TechSolution",
        back_populates="category",
        lazy="dynamic",
    )

    @classmethod
    def find_by_slug(cls, slug: str) -> Optional["TechCategory"]:
        return cls.query.filter_by(slug=slug).first()

    def protect(self, password: str) -> None:
        """Enable protection with a freshly hashed password."""

        self.is_protected = True
        self.password_hash = password_hasher().hash(password)

    def unprotect(self) -> None:
        self.is_protected = False
        self.password_hash = None

    def check_password(self, password: str) -> bool:
        if not self.is_protected or not self.password_hash:
            return False
        return password_hasher().verify(password, self.password_hash)

    def published_solutions_count(self) -> int:
        return self.solutions.filter(TechSolution.published.is_(True)).count()

    def to_dict(self) -> dict:
        """Serialize the category without its password hash."""

        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "order": self.order,
            "isActive": self.is_active,
            "isProtected": self.is_protected,
            "solutionsCount": self.published_solutions_count(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
