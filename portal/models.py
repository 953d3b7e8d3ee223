from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DECIMAL,
    Date,
    DateTime,
    Enum,
    ForeignKeyConstraint,
    Index,
    Integer,
    JSON,
    LargeBinary,
    String,
    Text,
    Time,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata


class Account(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("email", "email", unique=True),
        Index("username", "username", unique=True),
    )

    id = mapped_column(Integer, primary_key=True)
    email = mapped_column(String(255), nullable=False)
    password_hash = mapped_column(LargeBinary(72), nullable=False)
    is_admin = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    created_at = mapped_column(DateTime, server_default=func.now())
    updated_at = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )
    username = mapped_column(String(50))
    first_name = mapped_column(String(100))
    last_name = mapped_column(String(100))

    location: Mapped[Optional["Location"]] = relationship(
        "Location",
        uselist=False,
        back_populates="owner",
        foreign_keys="Location.owner_id",
    )
    staff_memberships: Mapped[List["StaffMembership"]] = relationship(
        "StaffMembership",
        uselist=True,
        back_populates="user",
        foreign_keys="StaffMembership.user_id",
    )
    devices: Mapped[List["UserDevice"]] = relationship(
        "UserDevice", uselist=True, back_populates="user"
    )


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        ForeignKeyConstraint(
            ["owner_id"], ["users.id"], ondelete="RESTRICT", name="fk_location_owner"
        ),
        ForeignKeyConstraint(
            ["reviewed_by"], ["users.id"], ondelete="SET NULL", name="fk_location_reviewer"
        ),
        Index("owner_id_unique", "owner_id", unique=True),
        Index("idx_review_queue", "application_approved", "rejected", "submitted_at"),
        Index("idx_coords", "latitude", "longitude"),
    )

    id = mapped_column(Integer, primary_key=True)
    owner_id = mapped_column(Integer, nullable=False)
    store_name = mapped_column(String(120), nullable=False)
    subscription_tier = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    subscription_status = mapped_column(
        Enum("free", "active", name="subscription_status"),
        nullable=False,
        default="free",
        server_default=text("'free'"),
    )
    visible_on_app = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    verified = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    application_approved = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    rejected = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())
    updated_at = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
    phone = mapped_column(String(25))
    email = mapped_column(String(255))
    website = mapped_column(String(255))
    description = mapped_column(Text)
    address = mapped_column(String(255))
    city = mapped_column(String(100))
    state = mapped_column(String(2))
    zip_code = mapped_column(String(10))
    latitude = mapped_column(DECIMAL(9, 6))
    longitude = mapped_column(DECIMAL(9, 6))
    operating_hours = mapped_column(JSON)
    rejection_reason = mapped_column(Text)
    admin_notes = mapped_column(Text)
    submitted_at = mapped_column(DateTime)
    application_updated_at = mapped_column(DateTime)
    reviewed_at = mapped_column(DateTime)
    reviewed_by = mapped_column(Integer)

    owner: Mapped["Account"] = relationship(
        "Account", back_populates="location", foreign_keys=[owner_id]
    )
    staff: Mapped[List["StaffMembership"]] = relationship(
        "StaffMembership", uselist=True, back_populates="location"
    )
    events: Mapped[List["RecurringEvent"]] = relationship(
        "RecurringEvent",
        uselist=True,
        back_populates="location",
        order_by="RecurringEvent.id",
    )
    blocked_times: Mapped[List["BlockedTime"]] = relationship(
        "BlockedTime", uselist=True, back_populates="location"
    )
    trade_schedules: Mapped[List["TradeSchedule"]] = relationship(
        "TradeSchedule", uselist=True, back_populates="location"
    )
    followers: Mapped[List["LocationFollower"]] = relationship(
        "LocationFollower", uselist=True, back_populates="location"
    )


class StaffMembership(Base):
    __tablename__ = "location_staff"
    __table_args__ = (
        ForeignKeyConstraint(
            ["location_id"], ["locations.id"], ondelete="CASCADE", name="fk_staff_location"
        ),
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_staff_user"
        ),
        ForeignKeyConstraint(
            ["invited_by"], ["users.id"], ondelete="SET NULL", name="fk_staff_inviter"
        ),
        Index("location_user_unique", "location_id", "user_id", unique=True),
        Index("idx_staff_user_status", "user_id", "status"),
    )

    id = mapped_column(Integer, primary_key=True)
    location_id = mapped_column(Integer, nullable=False)
    user_id = mapped_column(Integer, nullable=False)
    role = mapped_column(
        Enum("owner", "admin", "staff", name="staff_role"),
        nullable=False,
        default="staff",
        server_default=text("'staff'"),
    )
    can_add_staff = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    status = mapped_column(
        Enum("active", "pending", "removed", name="staff_status"),
        nullable=False,
        default="active",
        server_default=text("'active'"),
    )
    invited_by = mapped_column(Integer)
    invited_at = mapped_column(DateTime)
    accepted_at = mapped_column(DateTime)

    location: Mapped["Location"] = relationship("Location", back_populates="staff")
    user: Mapped["Account"] = relationship(
        "Account", back_populates="staff_memberships", foreign_keys=[user_id]
    )


class RecurringEvent(Base):
    __tablename__ = "location_events"
    __table_args__ = (
        ForeignKeyConstraint(
            ["location_id"], ["locations.id"], ondelete="CASCADE", name="fk_event_location"
        ),
        Index("idx_event_location", "location_id", "is_recurring"),
    )

    id = mapped_column(Integer, primary_key=True)
    location_id = mapped_column(Integer, nullable=False)
    name = mapped_column(String(100), nullable=False)
    category = mapped_column(
        Enum("trade", "tournament", "card_show", name="event_category"),
        nullable=False,
    )
    recurrence_day = mapped_column(String(9), nullable=False)
    start_time = mapped_column(Time, nullable=False)
    end_time = mapped_column(Time, nullable=False)
    is_recurring = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("1")
    )
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    location: Mapped["Location"] = relationship("Location", back_populates="events")


class BlockedTime(Base):
    __tablename__ = "location_blocked_times"
    __table_args__ = (
        ForeignKeyConstraint(
            ["location_id"], ["locations.id"], ondelete="CASCADE", name="fk_block_location"
        ),
        Index("idx_block_location_date", "location_id", "date"),
    )

    id = mapped_column(Integer, primary_key=True)
    location_id = mapped_column(Integer, nullable=False)
    date = mapped_column(Date, nullable=False)
    all_day = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("0")
    )
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())
    start_time = mapped_column(Time)
    end_time = mapped_column(Time)
    reason = mapped_column(String(255))

    location: Mapped["Location"] = relationship(
        "Location", back_populates="blocked_times"
    )


class TradeRequest(Base):
    __tablename__ = "trade_requests"
    __table_args__ = (
        ForeignKeyConstraint(
            ["requester_id"], ["users.id"], ondelete="CASCADE", name="fk_trade_requester"
        ),
        ForeignKeyConstraint(
            ["card_owner_id"], ["users.id"], ondelete="CASCADE", name="fk_trade_card_owner"
        ),
    )

    id = mapped_column(Integer, primary_key=True)
    requester_id = mapped_column(Integer, nullable=False)
    card_owner_id = mapped_column(Integer, nullable=False)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())
    card_name = mapped_column(String(255))
    card_image_url = mapped_column(String(512))

    requester: Mapped["Account"] = relationship("Account", foreign_keys=[requester_id])
    card_owner: Mapped["Account"] = relationship(
        "Account", foreign_keys=[card_owner_id]
    )
    schedules: Mapped[List["TradeSchedule"]] = relationship(
        "TradeSchedule", uselist=True, back_populates="trade_request"
    )


class TradeSchedule(Base):
    __tablename__ = "trade_schedules"
    __table_args__ = (
        ForeignKeyConstraint(
            ["trade_request_id"],
            ["trade_requests.id"],
            ondelete="CASCADE",
            name="fk_schedule_request",
        ),
        ForeignKeyConstraint(
            ["location_id"], ["locations.id"], ondelete="CASCADE", name="fk_schedule_location"
        ),
        Index("idx_schedule_location_date", "location_id", "selected_date"),
    )

    id = mapped_column(Integer, primary_key=True)
    trade_request_id = mapped_column(Integer, nullable=False)
    location_id = mapped_column(Integer, nullable=False)
    selected_date = mapped_column(Date, nullable=False)
    status = mapped_column(
        Enum("confirmed", "cancelled", name="trade_schedule_status"),
        nullable=False,
        default="confirmed",
        server_default=text("'confirmed'"),
    )
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())
    # "HH:MM", 24-hour, zero padded; NULL means the time is still TBD
    selected_time = mapped_column(String(5))
    cancelled_at = mapped_column(DateTime)

    trade_request: Mapped["TradeRequest"] = relationship(
        "TradeRequest", back_populates="schedules"
    )
    location: Mapped["Location"] = relationship(
        "Location", back_populates="trade_schedules"
    )


class LocationFollower(Base):
    __tablename__ = "location_followers"
    __table_args__ = (
        ForeignKeyConstraint(
            ["location_id"], ["locations.id"], ondelete="CASCADE", name="fk_follower_location"
        ),
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_follower_user"
        ),
    )

    location_id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(Integer, primary_key=True)
    created_at = mapped_column(DateTime, server_default=func.now())

    location: Mapped["Location"] = relationship("Location", back_populates="followers")


class UserDevice(Base):
    __tablename__ = "user_devices"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_device_user"
        ),
        Index("idx_device_user", "user_id"),
    )

    id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(Integer, nullable=False)
    created_at = mapped_column(DateTime, server_default=func.now())
    onesignal_player_id = mapped_column(String(128))
    platform = mapped_column(String(20))

    user: Mapped["Account"] = relationship("Account", back_populates="devices")
