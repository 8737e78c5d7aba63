from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from app.db.session import Base

class Reaction(Base):
    __tablename__ = "reactions"
    __table_args__ = (
        # At most one reaction of a kind per user per post
        UniqueConstraint("author_id", "post_id", "kind", name="uq_reaction_author_post_kind"),
    )

    id = Column(String, primary_key=True, index=True)
    kind = Column(String, nullable=False)  # LIKE, REPOST
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime, default=func.now())
