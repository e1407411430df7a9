# arena/models/vote.py
from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from arena.database import Base, UTCDateTime, utcnow
import uuid

class Vote(Base):
    """Ledger row; never updated or deleted"""
    __tablename__ = "votes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    artwork_id = Column(String, ForeignKey("artworks.id", ondelete="CASCADE"), nullable=False)
    contest_id = Column(String, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)

    # Voter
    voter_key = Column(String, nullable=False)  # user:<id> or anon:<fingerprint>
    scope_key = Column(String, nullable=False)  # cooldown scope the vote counted against
    sequence = Column(Integer, nullable=False)  # n-th accepted vote of voter_key in scope_key
    user_id = Column(String, nullable=True)     # authenticated voters only
    ip_hash = Column(String, nullable=True)     # analytics
    user_agent = Column(String, nullable=True)

    voted_at = Column(UTCDateTime, nullable=False, default=utcnow)

    artwork = relationship("Artwork")
    contest = relationship("Contest")

    __table_args__ = (
        # Last-resort net behind the cooldown check: two writers that read the
        # same cooldown state claim the same sequence number.
        UniqueConstraint("voter_key", "scope_key", "sequence", name="uq_votes_voter_scope_sequence"),
        Index("idx_votes_artwork_id", "artwork_id"),
        Index("idx_votes_contest_id", "contest_id"),
    )

    def __repr__(self):
        return f"<Vote {self.id} for Artwork {self.artwork_id}>"
