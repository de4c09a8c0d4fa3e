from __future__ import annotations

import pytest

from travis_v3.errors import (
    DecodeError,
    MalformedDocumentError,
    MissingDiscriminatorError,
    MissingFieldError,
    RemoteError,
    SchemaMismatchError,
    TransportError,
    TravisError,
    UnparseableLinkError,
)
from travis_v3.result import Failure, Success

pytestmark = pytest.mark.unit


def test_remote_error_structured_metadata() -> None:
    err = RemoteError(
        "repository not found",
        error_type="not_found",
        hint="check the slug",
        resource_type="repository",
        permission=None,
        status_code=404,
    )

    assert str(err) == "repository not found"
    assert err.hint == "check the slug"
    assert err.error_type == "not_found"
    assert err.resource_type == "repository"
    assert err.status_code == 404


def test_transport_error_defaults_to_none() -> None:
    err = TransportError("fail")
    assert err.hint is None
    assert err.status_code is None


def test_missing_field_names_the_key() -> None:
    err = MissingFieldError("@href")
    assert err.name == "@href"
    assert "@href" in str(err)

    disc = MissingDiscriminatorError()
    assert disc.name == "@type"


def test_unparseable_link_keeps_href() -> None:
    err = UnparseableLinkError("::bad::")
    assert err.href == "::bad::"


def test_subclass_hierarchy() -> None:
    """Decode failures are catchable as DecodeError and TravisError."""
    for err in (
        MalformedDocumentError("x"),
        MissingFieldError("@href"),
        MissingDiscriminatorError(),
        SchemaMismatchError("x"),
        UnparseableLinkError("x"),
    ):
        assert isinstance(err, DecodeError)
        assert isinstance(err, TravisError)

    assert isinstance(MissingDiscriminatorError(), MissingFieldError)
    assert not isinstance(RemoteError("x", error_type="e"), DecodeError)
    assert not isinstance(TransportError("x"), DecodeError)


def test_result_variants() -> None:
    ok = Success(3)
    bad = Failure(TransportError("down"))

    assert ok.ok is True
    assert ok.unwrap() == 3
    assert bad.ok is False
    with pytest.raises(TransportError, match="down"):
        bad.unwrap()
