from datetime import datetime
from enum import Enum
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base


class SubscriptionType(str, Enum):
    FREE = 'free'
    PREMIUM = 'premium'


class User(Base):
    """Platform user. Only `is_subscribed` matters for revenue distribution."""

    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)

    # Premium time is time spent by subscribed users only
    is_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    subscription_type: Mapped[str] = mapped_column(
        String(20), default=SubscriptionType.FREE.value,
    )

    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    developer: Mapped['Developer'] = relationship(
        'Developer', back_populates='user', uselist=False,
    )
