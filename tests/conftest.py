import json
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from credentials import ServiceAccountCredential

TOKEN_URI = "https://oauth2.googleapis.com/token"


def make_response(status_code=200, payload=None, text=None):
    """A stand-in for requests.Response with just what the clients read."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if payload is not None:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    return response


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def credential(private_key_pem):
    return ServiceAccountCredential(
        client_email="leads@demo-project.iam.gserviceaccount.com",
        private_key=private_key_pem,
        token_uri=TOKEN_URI,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def google_session():
    """
    A session whose POSTs answer like Google: the token endpoint hands out
    numbered tokens valid for an hour, everything else is a Sheets append.
    Tests can override `token_response` / `append_response`.
    """
    session = MagicMock()
    session.token_calls = 0
    session.token_response = None
    session.append_response = make_response(200, {
        "spreadsheetId": "sheet-123",
        "updates": {"updatedRange": "Página1!A2:F2", "updatedRows": 1},
    })

    def post(url, **kwargs):
        if url == TOKEN_URI:
            session.token_calls += 1
            if session.token_response is not None:
                return session.token_response
            return make_response(200, {
                "access_token": f"ya29.token-{session.token_calls}",
                "expires_in": 3600,
                "token_type": "Bearer",
            })
        return session.append_response

    session.post.side_effect = post
    return session


def append_calls(session):
    return [c for c in session.post.call_args_list if c.args[0] != TOKEN_URI]
