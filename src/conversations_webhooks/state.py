from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .config import get_settings
from .schema import AddressConfigurationWebhookState, Timeouts


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class ResourceState(Base):
    __tablename__ = "resource_states"

    # User-chosen resource name, e.g. "support_line"
    name: Mapped[str] = mapped_column(String, primary_key=True)
    sid: Mapped[str] = mapped_column(String(34), nullable=False)
    attributes_json: Mapped[str] = mapped_column(Text, nullable=False)
    # Operation timeouts of the last applied config; NULL means defaults
    timeouts_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# --- Engine & Session factory ---

settings = get_settings()

engine = create_engine(
    settings.state_database_url,
    connect_args=(
        {"check_same_thread": False} if settings.state_database_url.startswith("sqlite") else {}
    ),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)


def save_state(
    db: Session,
    name: str,
    state: AddressConfigurationWebhookState,
    timeouts: Timeouts | None = None,
) -> None:
    """
    Store `state` under `name`.

    `timeouts` replaces the stored operation timeouts when given; otherwise
    the previously stored ones are kept.
    """
    row = db.get(ResourceState, name)
    if row is None:
        row = ResourceState(name=name, sid=state.sid, attributes_json=state.model_dump_json())
        db.add(row)
    else:
        row.sid = state.sid
        row.attributes_json = state.model_dump_json()
    if timeouts is not None:
        row.timeouts_json = timeouts.model_dump_json()
    db.commit()


def load_state(db: Session, name: str) -> AddressConfigurationWebhookState | None:
    row = db.get(ResourceState, name)
    if row is None:
        return None
    return AddressConfigurationWebhookState.model_validate_json(row.attributes_json)


def load_timeouts(db: Session, name: str) -> Timeouts:
    """Timeouts stored with `name`, or the defaults if none were stored."""
    row = db.get(ResourceState, name)
    if row is None or row.timeouts_json is None:
        return Timeouts()
    return Timeouts.model_validate_json(row.timeouts_json)


def delete_state(db: Session, name: str) -> bool:
    """Forget the stored state for `name`. Returns False if there was none."""
    row = db.get(ResourceState, name)
    if row is None:
        return False
    db.delete(row)
    db.commit()
    return True


def list_states(db: Session) -> list[tuple[str, AddressConfigurationWebhookState]]:
    rows = db.scalars(select(ResourceState).order_by(ResourceState.name)).all()
    return [
        (row.name, AddressConfigurationWebhookState.model_validate_json(row.attributes_json))
        for row in rows
    ]
