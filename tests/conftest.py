"""Shared fixtures."""

import pytest

from otp_auth.services.auth import AuthService
from otp_auth.services.otp import OtpEngine
from otp_auth.services.tokens import SessionIssuer

from tests.fakes import TEST_SECRET, InMemoryCredentialStore, RecordingNotifier


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def issuer():
    return SessionIssuer(secret=TEST_SECRET)


@pytest.fixture
def otp_engine():
    # lowest bcrypt cost keeps the suite fast
    return OtpEngine(rounds=4, expiry_seconds=600)


@pytest.fixture
def service(store, notifier, issuer, otp_engine):
    return AuthService(store=store, notifier=notifier, issuer=issuer, otp=otp_engine)
