"""
Service providers for route injection.

Tests replace these through app.dependency_overrides.
"""

from fastapi import Depends

from jobboard.core.auth import get_token_codec
from jobboard.core.config import Settings, get_settings
from jobboard.core.tokens import TokenCodec
from jobboard.db.mongodb import get_resume_bucket
from jobboard.db.postgres import ANON, SERVICE
from jobboard.services.admin_login import AdminLogin
from jobboard.services.google_identity import GoogleIdentityClient
from jobboard.services.identity_exchange import IdentityExchange
from jobboard.services.resume_storage import ResumeStorage
from jobboard.services.store import DataStore


def get_service_store() -> DataStore:
    """Privileged store client (writes, admin reads)."""
    return DataStore(SERVICE)


def get_anon_store() -> DataStore:
    """Read-limited store client for public listings."""
    return DataStore(ANON)


def get_resume_storage(settings: Settings = Depends(get_settings)) -> ResumeStorage:
    return ResumeStorage(get_resume_bucket, settings)


def get_google_identity_client(settings: Settings = Depends(get_settings)) -> GoogleIdentityClient:
    return GoogleIdentityClient(settings)


def get_identity_exchange(
    store: DataStore = Depends(get_service_store),
    google: GoogleIdentityClient = Depends(get_google_identity_client),
    codec: TokenCodec = Depends(get_token_codec),
) -> IdentityExchange:
    return IdentityExchange(store, google, codec)


def get_admin_login(
    store: DataStore = Depends(get_service_store),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> AdminLogin:
    return AdminLogin(store, codec, settings)
