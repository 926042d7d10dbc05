"""
Pytest configuration and fixtures for all tests.

Provides an in-memory database, seeded servers/modules and mocked remote
clients shared by the client, service, job and API tests.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from flowgate.client.galaxy import GalaxyClient
from flowgate.client.genepattern import GenePatternClient
from flowgate.database.base import Base
from flowgate.database.models import AnalysisServer, Module, ModuleParam
from flowgate.models.domain import (
    Dataset,
    ExpFile,
    ExpFileMetadata,
    Experiment,
    Platform,
    Project,
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "api: marks tests that exercise the FastAPI app"
    )


@pytest.fixture
def db():
    """Fresh in-memory SQLite session per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def gp_server(db):
    server = AnalysisServer(
        name="GenePattern",
        url="https://gp.example.org",
        user_name="flowgate",
        platform=int(Platform.GENEPATTERN),
    )
    server.password = "secret"
    db.add(server)
    db.commit()
    return server


@pytest.fixture
def galaxy_server(db):
    server = AnalysisServer(
        name="ImmPortGalaxy",
        url="https://galaxy.example.org",
        user_name="flowgate@example.org",
        platform=int(Platform.GALAXY),
    )
    server.password = "secret"
    db.add(server)
    db.commit()
    return server


@pytest.fixture
def gp_module(db, gp_server):
    module = Module(server=gp_server, name="FlowClusterPipeline", title="Flow clustering")
    module.module_params = [
        ModuleParam(p_key="Input.Files", p_type="ds", p_order=0),
        ModuleParam(p_key="clusters", p_type=None, default_val="5", p_order=1),
    ]
    db.add(module)
    db.commit()
    return module


@pytest.fixture
def galaxy_module(db, galaxy_server):
    module = Module(server=galaxy_server, name="f2db41e1fa331b3e", title="FLOCK workflow")
    module.module_params = [
        ModuleParam(p_key="FCS files", p_type="ds", p_order=0),
    ]
    db.add(module)
    db.commit()
    return module


@pytest.fixture
def experiment():
    return Experiment(id=7, title="Tcell panel", project=Project(id=3, title="Immune profiling"))


@pytest.fixture
def dataset(tmp_path):
    """Two FCS files on disk with partly overlapping metadata."""
    (tmp_path / "a.fcs").write_bytes(b"FCS3.0 a")
    (tmp_path / "b.fcs").write_bytes(b"FCS3.0 b")
    file_path = str(tmp_path) + "/"
    return Dataset(
        id=11,
        name="Baseline",
        description="Day 0 samples",
        exp_files=[
            ExpFile(
                id=1,
                file_name="a.fcs",
                file_path=file_path,
                metadata=[
                    ExpFileMetadata(md_key="Subject", md_val="S1"),
                    ExpFileMetadata(md_key="Visit", md_val="1"),
                ],
            ),
            ExpFile(
                id=2,
                file_name="b.fcs",
                file_path=file_path,
                metadata=[
                    ExpFileMetadata(md_key="Subject", md_val="S2"),
                    ExpFileMetadata(md_key="Stim", md_val="CMV"),
                ],
            ),
        ],
    )


def _client_mock(cls):
    client = MagicMock(spec=cls)
    client.__enter__.return_value = client
    return client


@pytest.fixture
def gp_client():
    return _client_mock(GenePatternClient)


@pytest.fixture
def galaxy_client():
    return _client_mock(GalaxyClient)
