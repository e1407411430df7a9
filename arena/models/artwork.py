# arena/models/artwork.py
from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from arena.database import Base, UTCDateTime, utcnow
import uuid

class Artwork(Base):
    """Contest entry"""
    __tablename__ = "artworks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    contest_id = Column(String, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=False)  # stored elsewhere, referenced only
    prompt = Column(Text, nullable=True)
    artist_name = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)  # grid order

    # Tie-break key when tallies are equal
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    contest = relationship("Contest", back_populates="artworks", foreign_keys=[contest_id])

    __table_args__ = (
        Index("idx_artworks_contest_id", "contest_id"),
    )

    def __repr__(self):
        return f"<Artwork {self.title}>"
