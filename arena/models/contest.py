# arena/models/contest.py
from sqlalchemy import Column, String, Integer, ForeignKey, Enum as SQLEnum, CheckConstraint, Index
from sqlalchemy.orm import relationship
from arena.database import Base, UTCDateTime, utcnow
import uuid
import enum

class ContestStatus(str, enum.Enum):
    """Contest lifecycle state"""
    SCHEDULED = "scheduled"  # window not started yet
    ACTIVE = "active"        # accepting votes
    ARCHIVED = "archived"    # closed, winner frozen

class Contest(Base):
    """Weekly contest"""
    __tablename__ = "contests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # Voting window [start_date, end_date)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)

    # Only the lifecycle tick moves this forward
    status = Column(
        SQLEnum(ContestStatus, values_callable=lambda e: [m.value for m in e], name="contest_status"),
        nullable=False,
        default=ContestStatus.SCHEDULED
    )

    # Result
    winner_artwork_id = Column(
        String,
        ForeignKey("artworks.id", ondelete="SET NULL", use_alter=True, name="fk_contests_winner_artwork_id"),
        nullable=True
    )
    archived_at = Column(UTCDateTime, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    artworks = relationship(
        "Artwork",
        back_populates="contest",
        foreign_keys="Artwork.contest_id",
        cascade="all, delete-orphan",
        order_by="Artwork.position"
    )
    winner = relationship("Artwork", foreign_keys=[winner_artwork_id], post_update=True)

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_contest_window"),
        Index("idx_contests_window", "start_date", "end_date"),
        Index("idx_contests_status", "status"),
    )

    def __repr__(self):
        return f"<Contest week {self.week_number}/{self.year} - {self.status}>"
