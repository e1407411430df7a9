# arena/models/cooldown.py
from sqlalchemy import Column, String, Integer
from arena.database import Base, UTCDateTime, utcnow

class VoteCooldown(Base):
    """Last accepted vote per (voter, scope); expires by time comparison only"""
    __tablename__ = "vote_cooldowns"

    voter_key = Column(String, primary_key=True)
    scope_key = Column(String, primary_key=True)

    last_vote_at = Column(UTCDateTime, nullable=False)
    vote_count = Column(Integer, nullable=False, default=1)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<VoteCooldown {self.voter_key[:16]} @ {self.scope_key}>"
