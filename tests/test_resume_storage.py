"""Tests for GridFS resume storage and signed links."""

import re
from urllib.parse import parse_qs, urlsplit

import pytest
from jose import jwt

from jobboard.core.errors import InvalidToken, NotFound
from jobboard.core.tokens import Role
from jobboard.services.resume_storage import ResumeStorage
from jobboard.utils.file_upload import resume_storage_path

from tests.conftest import PDF_BYTES


def token_of(url: str) -> str:
    return parse_qs(urlsplit(url).query)["token"][0]


@pytest.mark.asyncio
async def test_upload_then_download(storage):
    await storage.upload("resumes/u1/a.pdf", PDF_BYTES, "application/pdf")

    assert await storage.download("resumes/u1/a.pdf") == (PDF_BYTES, "application/pdf")


@pytest.mark.asyncio
async def test_download_missing(storage):
    with pytest.raises(NotFound):
        await storage.download("resumes/u1/none.pdf")


@pytest.mark.asyncio
async def test_remove_missing_is_quiet(storage, bucket):
    await storage.remove("resumes/u1/none.pdf")

    assert bucket.files == {}


def test_signed_url_is_bound_to_path(storage):
    token = token_of(storage.create_signed_url("resumes/u1/a.pdf"))

    storage.verify_signed_path(token, "resumes/u1/a.pdf")
    with pytest.raises(InvalidToken):
        storage.verify_signed_path(token, "resumes/u2/b.pdf")


def test_signed_url_expires_after_ten_minutes(storage):
    claims = jwt.get_unverified_claims(token_of(storage.create_signed_url("resumes/u1/a.pdf")))

    assert claims["exp"] - claims["iat"] == 600


def test_session_token_is_not_a_download_link(storage, codec):
    session = codec.issue("u1", "a@x.com", Role.user)

    with pytest.raises(InvalidToken):
        storage.verify_signed_path(session, "resumes/u1/a.pdf")


def test_storage_paths_are_unique_and_scoped():
    paths = {resume_storage_path("user-1") for _ in range(50)}

    assert len(paths) == 50
    assert all(re.fullmatch(r"resumes/user-1/[A-Za-z0-9_-]{16}\.pdf", p) for p in paths)


def test_base_url_trailing_slash(settings, bucket):
    storage = ResumeStorage(lambda: bucket, settings.model_copy(update={"public_base_url": "https://api.example.com/"}))

    assert storage.create_signed_url("resumes/u1/a.pdf").startswith("https://api.example.com/api/files/resumes/u1/a.pdf?token=")


def test_links_use_their_own_secret_when_configured(settings, bucket):
    storage = ResumeStorage(lambda: bucket, settings.model_copy(update={"signed_url_secret": "links-only-secret"}))
    forged = jwt.encode(
        {"path": "resumes/u1/a.pdf", "purpose": "resume-download", "exp": 4102444800},
        settings.jwt_secret_key,
    )

    storage.verify_signed_path(token_of(storage.create_signed_url("resumes/u1/a.pdf")), "resumes/u1/a.pdf")
    with pytest.raises(InvalidToken):
        storage.verify_signed_path(forged, "resumes/u1/a.pdf")


def test_link_secret_defaults_to_session_secret(settings):
    assert settings.download_link_secret == settings.jwt_secret_key
