"""Typed resource models for the Travis CI v3 API.

Resources come in two representations: a *minimal* stub embedded inside other
resources and a *full* representation fetched through the stub's ``@href``.
Every minimal model names its full counterpart via ``full_model()`` so
:meth:`travis_v3.client.TravisClient.follow` knows what to decode.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

ResourceT = TypeVar("ResourceT")


class TravisModel(BaseModel):
    """Immutable base for wire models; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Resource(TravisModel):
    """Fields every resource representation may carry."""

    #: ``@type`` discriminator, e.g. ``"repository"``.
    kind: str | None = Field(default=None, alias="@type")
    #: ``@href``; absent on synthetic stubs.
    path: str | None = Field(default=None, alias="@href")
    #: ``"minimal"`` or ``"standard"``.
    representation: str | None = Field(default=None, alias="@representation")


class MinimalResource(Resource):
    """An embedded stub that can be resolved into its full representation."""

    def full_model(self) -> type[Resource]:
        return Resource


# --- Minimal representations ---


class MinimalRepository(MinimalResource):
    id: int
    name: str | None = None
    slug: str | None = None

    def full_model(self) -> type[Resource]:
        return Repository


class MinimalBranch(MinimalResource):
    name: str

    def full_model(self) -> type[Resource]:
        return Branch


class MinimalBuild(MinimalResource):
    id: int
    number: str | None = None
    state: str | None = None
    duration: int | None = None
    event_type: str | None = None
    previous_state: str | None = None
    pull_request_title: str | None = None
    pull_request_number: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    private: bool | None = None

    def full_model(self) -> type[Resource]:
        return Build


class MinimalJob(MinimalResource):
    id: int

    def full_model(self) -> type[Resource]:
        return Job


class MinimalOwner(MinimalResource):
    """A user or organization stub; ``kind`` decides which."""

    id: int
    login: str | None = None

    def full_model(self) -> type[Resource]:
        if self.kind == "organization":
            return Organization
        return User


class Commit(Resource):
    """Commits are only ever embedded; there is no standalone commit endpoint."""

    id: int
    sha: str | None = None
    ref: str | None = None
    message: str | None = None
    compare_url: str | None = None
    committed_at: datetime | None = None


# --- Full representations ---


class Repository(Resource):
    id: int
    name: str
    slug: str
    description: str | None = None
    github_id: int | None = None
    github_language: str | None = None
    active: bool | None = None
    private: bool | None = None
    owner: MinimalOwner | None = None
    default_branch: MinimalBranch | None = None
    starred: bool | None = None
    managed_by_installation: bool | None = None
    active_on_org: bool | None = None


class Branch(Resource):
    name: str
    repository: MinimalRepository | None = None
    default_branch: bool | None = None
    exists_on_github: bool | None = None
    last_build: MinimalBuild | None = None


class Build(Resource):
    id: int
    number: str | None = None
    state: str | None = None
    duration: int | None = None
    event_type: str | None = None
    previous_state: str | None = None
    pull_request_title: str | None = None
    pull_request_number: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    updated_at: datetime | None = None
    private: bool | None = None
    repository: MinimalRepository | None = None
    branch: MinimalBranch | None = None
    tag: dict[str, Any] | None = None
    commit: Commit | None = None
    jobs: tuple[MinimalJob, ...] = ()
    created_by: MinimalOwner | None = None


class Job(Resource):
    id: int
    allow_failure: bool | None = None
    number: str | None = None
    state: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    private: bool | None = None
    queue: str | None = None
    build: MinimalBuild | None = None
    repository: MinimalRepository | None = None
    commit: Commit | None = None
    owner: MinimalOwner | None = None
    stage: dict[str, Any] | None = None


class User(Resource):
    id: int
    login: str | None = None
    name: str | None = None
    github_id: int | None = None
    avatar_url: str | None = None
    education: bool | None = None
    allow_migration: bool | None = None
    is_syncing: bool | None = None
    synced_at: datetime | None = None


class Organization(Resource):
    id: int
    login: str | None = None
    name: str | None = None
    github_id: int | None = None
    avatar_url: str | None = None


class LogPart(TravisModel):
    number: int
    content: str
    final: bool = False


class Log(Resource):
    id: int
    content: str | None = None
    log_parts: tuple[LogPart, ...] = ()


class EnvironmentVariable(Resource):
    id: str
    name: str
    #: Absent for private variables.
    value: str | None = None
    public: bool = False
    branch: str | None = None


class Setting(Resource):
    name: str
    value: bool | int


# --- Request bodies ---


class EnvironmentVariableRequest(TravisModel):
    """Body for creating or updating an environment variable.

    Serializes with the API's ``env_var.``-prefixed keys.
    """

    name: str = Field(alias="env_var.name")
    value: str = Field(alias="env_var.value")
    public: bool = Field(default=False, alias="env_var.public")
    branch: str | None = Field(default=None, alias="env_var.branch")

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Non-enveloped documents ---


class Action(TravisModel, Generic[ResourceT]):
    """Acknowledgement for a state change such as a build restart.

    The affected resource is nested under the key named by ``resource_type``.
    """

    kind: str = Field(alias="@type")
    state_change: str
    resource_type: str
    resource: ResourceT

    @model_validator(mode="before")
    @classmethod
    def _lift_resource(cls, data: Any) -> Any:
        if isinstance(data, dict) and "resource" not in data:
            key = data.get("resource_type")
            if isinstance(key, str) and key in data:
                return {**data, "resource": data[key]}
        return data


class ErrorMessage(TravisModel):
    """The service's structured error document."""

    kind: Literal["error"] = Field(alias="@type")
    error_type: str
    error_message: str
    resource_type: str | None = None
    permission: str | None = None
