"""Integration test fixtures and configuration.

The gateway runs end to end against the Flask mock registry: the provisioner's
boto3 clients are doubles, the liveness probe and SOAP posts are routed into
the Flask test client, and everything else (request building, classification,
signing, parsing and envelope mapping) is the real code.
"""

import io
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest
from flask.testing import FlaskClient

from hi_gateway.config import Config
from hi_gateway.gateway.handlers import handle
from hi_gateway.hi_transactions.operations import Surface
from hi_gateway.mock_server.app import app
from hi_gateway.provisioning.certificate_store import CertificateStore
from hi_gateway.provisioning.parameter_store import ParameterStore
from hi_gateway.provisioning.provisioner import ClientProvisioner

REGISTRY_URI = "https://hi.example.test/services/"


class MockRegistrySession:
    """requests.Session stand-in that posts into the Flask test client."""

    def __init__(self, client: FlaskClient, base_uri: str = REGISTRY_URI) -> None:
        self.client = client
        self.base_uri = base_uri
        self.posts: list[dict[str, Any]] = []

    def post(self, url, data=None, headers=None, timeout=None):
        path = "/" + url[len(self.base_uri):]
        self.posts.append({"url": url, "headers": dict(headers or {}), "timeout": timeout})
        response = self.client.post(path, data=data, headers=headers)
        return SimpleNamespace(
            status_code=response.status_code,
            reason=response.status,
            text=response.get_data(as_text=True),
            content=response.get_data(),
        )


@pytest.fixture
def flask_client() -> FlaskClient:
    """Flask test client for the mock registry."""
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def registry_session(flask_client) -> MockRegistrySession:
    return MockRegistrySession(flask_client)


@pytest.fixture
def certificate_blob(valid_pkcs12) -> dict[str, bytes]:
    """Blob served by the S3 double; tests may swap it."""
    return {"blob": valid_pkcs12}


@pytest.fixture
def s3_double(certificate_blob) -> MagicMock:
    client = MagicMock()
    client.get_object.side_effect = lambda Bucket, Key: {"Body": io.BytesIO(certificate_blob["blob"])}
    return client


@pytest.fixture
def liveness(flask_client):
    """Route the liveness probe to the mock registry's GET /."""
    with patch("hi_gateway.provisioning.provisioner.requests.get") as get:
        get.side_effect = lambda uri, timeout, verify: SimpleNamespace(
            status_code=flask_client.get("/").status_code
        )
        yield get


@pytest.fixture
def gateway(ssm_client, s3_double, registry_session, liveness) -> Callable[[Surface, Any], dict[str, Any]]:
    """Invoke a surface handler end to end against the mock registry."""
    config = Config()

    def provisioner_factory() -> ClientProvisioner:
        return ClientProvisioner(
            config,
            parameter_store=ParameterStore(config.parameters, client=ssm_client),
            certificate_store=CertificateStore(config.certificate_store, client=s3_double),
            session_factory=lambda bundle, verify_tls: registry_session,
        )

    def _invoke(surface: Surface, payload: Any) -> dict[str, Any]:
        return handle(surface, payload, provisioner_factory=provisioner_factory, config=config)

    return _invoke
