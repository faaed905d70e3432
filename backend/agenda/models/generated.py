from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Text,
    UniqueConstraint, text, true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

# All DateTime columns hold naive UTC instants.


class ProviderSettings(Base):
    __tablename__ = 'provider_settings'

    provider_id = Column(Integer, primary_key=True, autoincrement=False)
    timezone = Column(Text, nullable=False, server_default=text("'America/Sao_Paulo'"))
    session_duration_video_min = Column(Integer, nullable=False, server_default=text('50'))
    session_duration_chat_min = Column(Integer, nullable=False, server_default=text('50'))
    min_cancel_hours = Column(Integer, nullable=False, server_default=text('24'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    rules = relationship('AvailabilityRules', back_populates='provider')
    blocks = relationship('AvailabilityBlocks', back_populates='provider')


class AvailabilityRules(Base):
    __tablename__ = 'availability_rules'
    __table_args__ = (
        CheckConstraint('weekday BETWEEN 0 AND 6'),
        Index('ix_availability_rules_provider', 'provider_id', 'weekday'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Text, nullable=False)  # "HH:MM"
    end_time = Column(Text, nullable=False)
    session_type = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=true())

    provider = relationship('ProviderSettings', back_populates='rules')


class AvailabilityBlocks(Base):
    __tablename__ = 'availability_blocks'
    __table_args__ = (
        CheckConstraint('end_at > start_at'),
        Index('ix_availability_blocks_range', 'provider_id', 'start_at', 'end_at'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    reason = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    provider = relationship('ProviderSettings', back_populates='blocks')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        CheckConstraint('end_at > start_at'),
        Index('ix_appointments_provider_range', 'provider_id', 'status', 'start_at', 'end_at'),
        Index('ix_appointments_client', 'client_id', 'start_at'),
    )

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, nullable=False)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    session_type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'scheduled'"))
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    cancel_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))


class SessionCredits(Base):
    __tablename__ = 'session_credits'
    __table_args__ = (
        UniqueConstraint('client_id', 'provider_id', 'session_type'),
        CheckConstraint('used >= 0 AND used <= total'),
    )

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, nullable=False)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    session_type = Column(Text, nullable=False)
    total = Column(Integer, nullable=False, server_default=text('0'))
    used = Column(Integer, nullable=False, server_default=text('0'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class Products(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text)
    session_type = Column(Text, nullable=False)
    sessions_count = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    orders = relationship('Orders', back_populates='product')


class Orders(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, nullable=False)
    provider_id = Column(ForeignKey('provider_settings.provider_id', ondelete='CASCADE'), nullable=False)
    product_id = Column(ForeignKey('products.id'), nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    amount_cents = Column(Integer, nullable=False)
    session_type = Column(Text, nullable=False)
    sessions_count = Column(Integer, nullable=False)
    payment_method = Column(Text)  # card | pix
    credited_at = Column(DateTime)  # set once by add_credits_from_order
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    product = relationship('Products', back_populates='orders')
