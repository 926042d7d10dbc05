"""
SQLAlchemy models for remote analysis servers, their modules and the
analyses submitted to them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from flowgate.constants import DEFAULT_RENDER_RESULT, JOB_NUMBER_SEPARATOR
from flowgate.credentials import decrypt_password, encrypt_password
from flowgate.database.base import Base
from flowgate.models.domain import AnalysisStatus, Platform


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisServer(Base):
    """A GenePattern or Galaxy server with stored (encrypted) credentials."""

    __tablename__ = "analysis_servers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    url = Column(String(1024), nullable=False)
    user_name = Column(String(255), nullable=True)
    user_pw = Column(Text, nullable=True)
    platform = Column(Integer, nullable=False, default=int(Platform.GENEPATTERN))
    owner = Column(String(255), nullable=True)

    modules = relationship("Module", back_populates="server")

    @property
    def password(self) -> Optional[str]:
        return decrypt_password(self.user_pw) if self.user_pw else ""

    @password.setter
    def password(self, value: Optional[str]) -> None:
        self.user_pw = encrypt_password(value) if value else None

    def is_genepattern_server(self) -> bool:
        return self.platform == Platform.GENEPATTERN

    def is_galaxy_server(self) -> bool:
        return self.platform == Platform.GALAXY


class Module(Base):
    """A remote pipeline: GenePattern task name/LSID or Galaxy workflow id."""

    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    server_id = Column(Integer, ForeignKey("analysis_servers.id"), nullable=False, index=True)
    name = Column(String(1024), nullable=False)
    title = Column(String(512), nullable=False)
    label = Column(String(512), nullable=True)
    descript = Column(String(4096), nullable=True)

    server = relationship("AnalysisServer", back_populates="modules")
    module_params = relationship(
        "ModuleParam",
        back_populates="module",
        order_by="ModuleParam.id",
        cascade="all, delete-orphan",
    )


class ModuleParam(Base):
    """Parameter schema entry of a module."""

    __tablename__ = "module_params"

    id = Column(Integer, primary_key=True, autoincrement=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    p_key = Column(String(255), nullable=False)
    p_type = Column(String(32), nullable=True)
    p_label = Column(String(512), nullable=True)
    p_basic = Column(Boolean, nullable=False, default=True)
    p_order = Column(Integer, nullable=True)
    default_val = Column(String(1024), nullable=True)
    descr = Column(Text, nullable=True)

    module = relationship("Module", back_populates="module_params")


class Analysis(Base):
    """An analysis submitted to a remote server and its last polled status."""

    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    experiment_id = Column(Integer, nullable=True, index=True)
    user_name = Column(String(255), nullable=True)
    analysis_name = Column(String(512), nullable=False)
    analysis_description = Column(String(1024), nullable=True)
    job_number = Column(String(1024), nullable=True, index=True)
    analysis_status = Column(Integer, nullable=False, default=int(AnalysisStatus.INIT))
    render_result = Column(String(512), nullable=True, default=DEFAULT_RENDER_RESULT)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    date_created = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    date_completed = Column(DateTime(timezone=True), nullable=True)

    module = relationship("Module")

    @property
    def status(self) -> AnalysisStatus:
        return AnalysisStatus(self.analysis_status)

    def job_numbers(self) -> List[str]:
        if not self.job_number:
            return []
        return [j.strip() for j in self.job_number.split(JOB_NUMBER_SEPARATOR) if j.strip()]

    def is_failed_on_submit(self) -> bool:
        try:
            return int(str(self.job_number).strip()) == -1
        except ValueError:
            return False
