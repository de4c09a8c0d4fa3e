"""Wire models: aliases, immutability and request-body encoding."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError
import pytest

from travis_v3.models import (
    Action,
    EnvironmentVariable,
    EnvironmentVariableRequest,
    ErrorMessage,
    Log,
    MinimalJob,
    Repository,
)
from tests.helpers import repository_doc

pytestmark = pytest.mark.contract


def test_metadata_keys_map_to_fields() -> None:
    repo = Repository.model_validate(repository_doc(1))

    assert repo.kind == "repository"
    assert repo.path == "/repo/1"
    assert repo.representation == "standard"
    assert repo.owner is not None and repo.owner.kind == "user"


def test_unknown_keys_are_ignored() -> None:
    repo = Repository.model_validate(repository_doc(1, vcs_type="GithubRepository"))

    assert not hasattr(repo, "vcs_type")


def test_models_are_frozen() -> None:
    repo = Repository.model_validate(repository_doc(1))

    with pytest.raises(ValidationError):
        repo.slug = "other/name"  # type: ignore[misc]


def test_private_env_var_has_no_value() -> None:
    env = EnvironmentVariable.model_validate(
        {"@type": "env_var", "id": "ev", "name": "SECRET", "public": False}
    )

    assert env.value is None


def test_log_parts_decode() -> None:
    log = Log.model_validate(
        {"@type": "log", "@href": "/job/1/log", "id": 1, "content": "hello", "log_parts": [{"number": 0, "content": "hello", "final": True}]}
    )

    assert log.log_parts[0].final is True


def test_action_lifts_resource_by_resource_type() -> None:
    action = Action[MinimalJob].model_validate(
        {"@type": "pending", "job": {"id": 3}, "state_change": "restart", "resource_type": "job"}
    )

    assert action.resource.id == 3
    assert action.kind == "pending"


def test_action_without_resource_fails() -> None:
    with pytest.raises(ValidationError):
        Action[MinimalJob].model_validate(
            {"@type": "pending", "state_change": "restart", "resource_type": "job"}
        )


def test_error_message_requires_error_type_tag() -> None:
    with pytest.raises(ValidationError):
        ErrorMessage.model_validate({"@type": "repository", "error_type": "x", "error_message": "y"})


def test_env_var_request_omits_missing_branch() -> None:
    body = EnvironmentVariableRequest(name="A", value="1").to_body()

    assert body == {"env_var.name": "A", "env_var.value": "1", "env_var.public": False}


@given(
    name=st.from_regex(r"[A-Z_][A-Z0-9_]{0,15}", fullmatch=True),
    value=st.text(max_size=20),
    public=st.booleans(),
    branch=st.one_of(st.none(), st.from_regex(r"[a-z][a-z0-9/-]{0,10}", fullmatch=True)),
)
@settings(max_examples=20, deadline=None, derandomize=True)
def test_env_var_body_round_trips_through_echo(
    name: str, value: str, public: bool, branch: str | None
) -> None:
    """Property: fields sent in a request body come back unchanged in the echo."""
    request = EnvironmentVariableRequest(name=name, value=value, public=public, branch=branch)
    body = request.to_body()
    echoed = {
        "@type": "env_var",
        "@href": "/repo/1/env_var/ev",
        "id": "ev",
        **{key.removeprefix("env_var."): val for key, val in body.items()},
    }

    env = EnvironmentVariable.model_validate(echoed)

    assert (env.name, env.value, env.public, env.branch) == (name, value, public, branch)
