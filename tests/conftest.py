import uuid
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from partiql_settings import PartiQLSettings
from scaffold import Scaffold

REGION = "us-east-1"
FIXTURE_PATH = Path(__file__).resolve().parent.parent / "moviedata.json"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def settings():
    return PartiQLSettings(region_name=REGION, table_name_prefix="test-movies")


@pytest.fixture
def table_name_factory(settings):
    """Builds run-scoped table names from an injected unique id."""

    def make(unique_id=None):
        return settings.table_name_for(unique_id or uuid.uuid4().hex[:8])

    return make


@pytest.fixture
def dyn_resource(aws_credentials):
    with mock_aws():
        yield boto3.resource("dynamodb", region_name=REGION)


@pytest.fixture
def scaffold(dyn_resource, settings):
    return Scaffold(dyn_resource, settings)


@pytest.fixture
def movie_fixture_path():
    return FIXTURE_PATH
