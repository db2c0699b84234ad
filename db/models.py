from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class TenantConfig(Base):
    """Stores connection details for one Bitwarden organization.

    client_secret is stored encrypted (Fernet). The encryption key is held
    in the BWCONFIG_SECRET_KEY environment variable or the local key file,
    never in the database.
    """

    __tablename__ = "tenant_configs"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    environment = Column(String(32), default="cloudUS", nullable=False)   # cloudUS, cloudEU, selfHosted
    self_hosted_url = Column(String(512), nullable=True)
    client_id = Column(String(512), nullable=False)                      # organization.<guid>
    client_secret_enc = Column(Text, nullable=False)                     # Fernet-encrypted
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    audit_logs = relationship("AuditLog", back_populates="tenant", lazy="select")
    trigger_states = relationship("TriggerState", back_populates="tenant",
                                  cascade="all, delete-orphan", lazy="select")

    def __repr__(self) -> str:
        return f"<TenantConfig name={self.name!r} env={self.environment} active={self.is_active}>"


class AuditLog(Base):
    """Immutable record of every operation performed through this toolset."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenant_configs.id"), nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    resource = Column(String(32), nullable=True)       # member, collection, group, policy, secret, etc.
    operation = Column(String(128), nullable=True)     # invite_member, update_policy, etc.
    action = Column(String(32), nullable=True)         # CREATE, UPDATE, DELETE, READ
    status = Column(String(16), nullable=True)         # SUCCESS, FAILURE, PARTIAL
    resource_id = Column(String(255), nullable=True)
    resource_name = Column(String(512), nullable=True)
    details = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)

    tenant = relationship("TenantConfig", back_populates="audit_logs")

    def __repr__(self) -> str:
        return f"<AuditLog [{self.timestamp}] {self.resource} {self.operation} {self.status}>"


class TriggerState(Base):
    """Last poll time of an event trigger, one row per (tenant, event)."""

    __tablename__ = "trigger_states"
    __table_args__ = (UniqueConstraint("tenant_id", "event", name="uq_trigger_state"),)

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenant_configs.id"), nullable=False)
    event = Column(String(64), nullable=False)          # allEvents, memberInvited, ...
    last_poll_time = Column(String(64), nullable=True)  # ISO-8601, sent verbatim as ?start=
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    tenant = relationship("TenantConfig", back_populates="trigger_states")

    def __repr__(self) -> str:
        return f"<TriggerState event={self.event!r} last_poll={self.last_poll_time}>"
