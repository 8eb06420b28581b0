from datetime import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class TimeTracking(Base):
    """Raw engagement sample appended by the browser extensions. Write-once."""

    __tablename__ = 'time_tracking'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'))
    website_id: Mapped[int] = mapped_column(ForeignKey('websites.id', ondelete='CASCADE'))

    # Seconds of active time
    duration: Mapped[int] = mapped_column(Integer)
    path: Mapped[str | None] = mapped_column(String(500), default=None)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_time_tracking_date', 'date'),
        Index('ix_time_tracking_website_date', 'website_id', 'date'),
        CheckConstraint('duration >= 0', name='ck_time_tracking_duration'),
    )
