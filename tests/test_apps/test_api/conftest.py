"""Shared fixtures for api app tests."""

import base64

import pytest


@pytest.fixture(autouse=True)
def _aws(mock_aws_services):
    """Every API test runs against mocked S3 and SQS."""
    return mock_aws_services


@pytest.fixture
def basic_auth():
    """Build an ``Authorization`` header for Basic credentials."""
    def build(email: str, password: str) -> dict[str, str]:
        encoded = base64.b64encode(f'{email}:{password}'.encode()).decode('ascii')
        return {'Authorization': f'Basic {encoded}'}
    return build


@pytest.fixture
def token(client, user, basic_auth):
    """Session token of the test user, obtained through /connect."""
    response = client.get(
        '/connect',
        headers=basic_auth('test@example.com', 'testpass123'),
    )
    return response.json()['token']


@pytest.fixture
def auth(token):
    """Session header of the test user."""
    return {'X-Token': token}


@pytest.fixture
def other_auth(client, other_user, basic_auth):
    """Session header of the second user."""
    response = client.get(
        '/connect',
        headers=basic_auth('other@example.com', 'testpass123'),
    )
    return {'X-Token': response.json()['token']}


@pytest.fixture
def upload(client):
    """POST an upload body to /files and return the response."""
    def post(headers: dict[str, str], **body):
        return client.post(
            '/files',
            body,
            content_type='application/json',
            headers=headers,
        )
    return post
