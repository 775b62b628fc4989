"""Tech solution (content page) model."""

import uuid
from datetime import datetime

from . import db


class TechSolution(db.Model):
    """A content page published under a tech category."""

    __tablename__ = "tech_solutions"
    __table_args__ = (
        db.UniqueConstraint("category_id", "slug", name="uq_tech_solutions_category_slug"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    category_id = db.Column(
        db.String(36), db.ForeignKey("tech_categories.id"), nullable=False, index=True
    )
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False)
    summary = db.Column(db.Text, nullable=True)
    content = db.Column(db.Text, nullable=False, default="")
    published = db.Column(db.Boolean, nullable=False, default=False)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    author_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    category = db.relationship("TechCategory", back_populates="solutions")
    author = db.relationship("User")

    @classmethod
    def find_in_category(cls, category_id: str, slug: str):
        return cls.query.filter_by(category_id=category_id, slug=slug).first()

    def to_dict(self, include_content: bool = False) -> dict:
        data = {
            "id": self.id,
            "categoryId": self.category_id,
            "title": self.title,
            "slug": self.slug,
            "summary": self.summary,
            "published": self.published,
            "viewCount": self.view_count,
            "authorId": self.author_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_content:
            data["content"] = self.content
        return data
