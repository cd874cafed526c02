from __future__ import annotations

import json
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .errors import (
    ConditionFailedError,
    ContractViolation,
    DynareadPyError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .expressions import FilterParams, ProjectionParams, build_filter_expression, build_projection_expression
from .filters import (
    ComparisonFilter,
    FilterExpression,
    Filters,
    FunctionFilter,
    parse_filter_expression,
    parse_filters,
)
from .paginate import Page, query_all, read_all, scan_all
from .request import (
    QueryParameters,
    RequestDescriptor,
    build_query_request,
    build_request,
    with_query,
)

if TYPE_CHECKING:
    from .config import DatabaseConfig, EnvConfig, create_boto3_config, get_dynamodb_client, is_lambda_environment
    from .repository import DynamoRepository, EntityRepository
    from .store import Boto3StoreClient, StoreClient


def _read_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "0.0.0"

    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) and version else "0.0.0"


__version__ = _read_version()


def __getattr__(name: str) -> Any:
    if name in {"Boto3StoreClient", "StoreClient"}:
        from . import store

        return getattr(store, name)
    if name in {"DynamoRepository", "EntityRepository"}:
        from . import repository

        return getattr(repository, name)
    if name in {
        "DatabaseConfig",
        "EnvConfig",
        "create_boto3_config",
        "get_dynamodb_client",
        "is_lambda_environment",
    }:
        from . import config

        return getattr(config, name)
    raise AttributeError(name)


__all__ = [
    "Boto3StoreClient",
    "build_filter_expression",
    "build_projection_expression",
    "build_query_request",
    "build_request",
    "ComparisonFilter",
    "ConditionFailedError",
    "ContractViolation",
    "create_boto3_config",
    "DatabaseConfig",
    "DynamoRepository",
    "DynareadPyError",
    "EntityRepository",
    "EnvConfig",
    "FilterExpression",
    "FilterParams",
    "Filters",
    "FunctionFilter",
    "get_dynamodb_client",
    "is_lambda_environment",
    "NotFoundError",
    "Page",
    "parse_filter_expression",
    "parse_filters",
    "ProjectionParams",
    "query_all",
    "QueryParameters",
    "read_all",
    "RequestDescriptor",
    "scan_all",
    "StoreClient",
    "StoreError",
    "ValidationError",
    "with_query",
    "__version__",
]
