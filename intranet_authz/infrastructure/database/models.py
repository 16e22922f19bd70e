# intranet_authz/infrastructure/database/models.py
#
# Projections of the intranet tables this service reads, plus audit_logs which
# it owns. Other columns belong to the CRUD handlers and are not mapped here.

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from intranet_authz.infrastructure.database.session import Base


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active")


class ChantierRow(Base):
    __tablename__ = "chantiers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    responsable_id = Column(Integer, ForeignKey("users.id"), nullable=True)


class InvoiceQuoteRow(Base):
    __tablename__ = "invoices_quotes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, nullable=False)
    document_number = Column(String, nullable=False, unique=True)
    chantier_id = Column(Integer, ForeignKey("chantiers.id"), nullable=True)


class ChantierFileRow(Base):
    __tablename__ = "chantier_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chantier_id = Column(Integer, ForeignKey("chantiers.id"), nullable=True, index=True)
    file_name = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)


class AuditLogRow(Base):
    """Append-only. No code path issues UPDATE or DELETE against this table."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String, nullable=False, index=True)
    resource_type = Column(String, nullable=False, index=True)
    resource_id = Column(Integer, nullable=True)
    ip_address = Column(Text, nullable=False)
    user_agent = Column(Text, nullable=False)
    details = Column(JSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
