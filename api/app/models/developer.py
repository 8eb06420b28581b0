from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base


class Developer(Base):
    """Developer profile. Auto-provisioned on first API key creation."""

    __tablename__ = 'developers'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE'), unique=True,
    )
    company_name: Mapped[str | None] = mapped_column(String(200))

    # e.g. {"paypal": "dev@example.com"} or {"bankAccount": {...}}
    payment_details: Mapped[dict | None] = mapped_column(JSON, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user: Mapped['User'] = relationship('User', back_populates='developer')
    api_keys: Mapped[list['ApiKey']] = relationship('ApiKey', back_populates='developer')


class ApiKey(Base):
    """API key issued to a developer. Websites hang off keys, not developers."""

    __tablename__ = 'api_keys'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True,
    )
    name: Mapped[str] = mapped_column(String(100))
    key: Mapped[str] = mapped_column(String(64), unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    developer: Mapped['Developer'] = relationship('Developer', back_populates='api_keys')
    websites: Mapped[list['Website']] = relationship('Website', back_populates='api_key')


class Website(Base):
    """Unit of attribution for engagement time."""

    __tablename__ = 'websites'

    id: Mapped[int] = mapped_column(primary_key=True)
    api_key_id: Mapped[int] = mapped_column(
        ForeignKey('api_keys.id', ondelete='CASCADE'), index=True,
    )
    name: Mapped[str] = mapped_column(String(200))
    url: Mapped[str] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    api_key: Mapped['ApiKey'] = relationship('ApiKey', back_populates='websites')
