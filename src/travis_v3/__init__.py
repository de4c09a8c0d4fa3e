"""travis_v3: typed async client for the Travis CI v3 API.

Public API:
    - TravisClient: One async method per endpoint, returning Result values
    - Config / Endpoint: Token and host configuration
    - decode(): Envelope decoding for raw response documents
    - Success / Failure: Result variants
"""

from __future__ import annotations

import logging

from travis_v3.client import TravisClient
from travis_v3.config import Config, Endpoint
from travis_v3.envelope import Envelope, Page, Pagination, decode
from travis_v3.errors import (
    ConfigurationError,
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
from travis_v3.links import follow_minimal, follow_page
from travis_v3.models import (
    Action,
    Branch,
    Build,
    Commit,
    EnvironmentVariable,
    EnvironmentVariableRequest,
    Job,
    Log,
    MinimalBranch,
    MinimalBuild,
    MinimalJob,
    MinimalOwner,
    MinimalRepository,
    Organization,
    Repository,
    Setting,
    User,
)
from travis_v3.queries import BuildQuery, GeneralQuery
from travis_v3.request import RequestBuilder, TravisRequest
from travis_v3.result import Failure, Result, Success
from travis_v3.transport import HttpxTransport, Transport, TransportResponse

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("travis-v3")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("travis_v3").addHandler(logging.NullHandler())

__all__ = [
    "Action",
    "Branch",
    "Build",
    "BuildQuery",
    "Commit",
    "Config",
    "ConfigurationError",
    "DecodeError",
    "Endpoint",
    "EnvironmentVariable",
    "EnvironmentVariableRequest",
    "Envelope",
    "Failure",
    "GeneralQuery",
    "HttpxTransport",
    "Job",
    "Log",
    "MalformedDocumentError",
    "MinimalBranch",
    "MinimalBuild",
    "MinimalJob",
    "MinimalOwner",
    "MinimalRepository",
    "MissingDiscriminatorError",
    "MissingFieldError",
    "Organization",
    "Page",
    "Pagination",
    "RemoteError",
    "Repository",
    "RequestBuilder",
    "Result",
    "SchemaMismatchError",
    "Setting",
    "Success",
    "Transport",
    "TransportError",
    "TransportResponse",
    "TravisClient",
    "TravisError",
    "UnparseableLinkError",
    "User",
    "decode",
    "follow_minimal",
    "follow_page",
]
