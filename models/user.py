"""User model definition."""

import uuid
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import validates

from . import db


ROLE_ADMIN = "ADMIN"
ROLE_EDITOR = "EDITOR"
ROLE_AUTHOR = "AUTHOR"
USER_ROLES = (ROLE_ADMIN, ROLE_EDITOR, ROLE_AUTHOR)


def _new_id() -> str:
    return str(uuid.uuid4())


def password_hasher():
    """Return the application's configured password hasher."""

    return current_app.extensions["password_hasher"]


class User(db.Model):
    """Represents a staff account of the knowledge base."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(16), nullable=False, default=ROLE_AUTHOR)
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("true"),
    )
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @validates("email")
    def _normalize_email(self, key, value):
        return (value or "").strip().lower()

    @classmethod
    def find_by_id(cls, user_id: str) -> Optional["User"]:
        return db.session.get(cls, user_id)

    @classmethod
    def find_by_email(cls, email: str) -> Optional["User"]:
        normalized = (email or "").strip().lower()
        return cls.query.filter(func.lower(cls.email) == normalized).first()

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = password_hasher().hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash; OAuth-only accounts never match."""

        return password_hasher().verify(password, self.password_hash)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isActive": self.is_active,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
