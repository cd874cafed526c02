from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.config import Config

from .errors import ContractViolation

TABLE_ENV_PREFIX = "DYNAREAD_TABLE_"


@dataclass(frozen=True)
class DatabaseConfig:
    tables: Mapping[str, str] = field(default_factory=dict)

    def table(self, logical_name: str) -> str:
        name = self.tables.get(logical_name.lower())
        if not name:
            raise ContractViolation(f"no table configured for {logical_name!r}")
        return name


@dataclass(frozen=True)
class EnvConfig:
    aws_region: str | None = None
    api_domain: str | None = None
    environment_name: str | None = None
    dynamodb_endpoint: str | None = None
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @staticmethod
    def from_environ(environ: Mapping[str, str] = os.environ) -> EnvConfig:
        tables = {
            key[len(TABLE_ENV_PREFIX) :].lower(): value
            for key, value in environ.items()
            if key.startswith(TABLE_ENV_PREFIX) and len(key) > len(TABLE_ENV_PREFIX) and value
        }
        return EnvConfig(
            aws_region=environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION") or None,
            api_domain=environ.get("API_DOMAIN") or None,
            environment_name=environ.get("ENVIRONMENT_NAME") or None,
            dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT") or None,
            database=DatabaseConfig(tables=tables),
        )


def is_lambda_environment(environ: Mapping[str, str] = os.environ) -> bool:
    return bool(
        environ.get("AWS_LAMBDA_FUNCTION_NAME") or "AWS_Lambda" in (environ.get("AWS_EXECUTION_ENV") or "")
    )


def create_boto3_config(
    *,
    connect_timeout: float = 1.0,
    read_timeout: float = 3.0,
    max_attempts: int = 3,
) -> Config:
    return Config(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        retries={"max_attempts": max_attempts, "mode": "adaptive"},
    )


_dynamodb_clients: dict[tuple[str | None, str | None], Any] = {}


def get_dynamodb_client(
    env: EnvConfig,
    *,
    config: Config | None = None,
    session: Any | None = None,
) -> Any:
    key = (env.aws_region, env.dynamodb_endpoint)
    existing = _dynamodb_clients.get(key)
    if existing is not None:
        return existing

    if config is None and is_lambda_environment():
        config = create_boto3_config()

    sess = session or boto3.session.Session(region_name=env.aws_region)
    client = sess.client(
        "dynamodb",
        region_name=env.aws_region,
        endpoint_url=env.dynamodb_endpoint,
        config=config,
    )
    _dynamodb_clients[key] = client
    return client


def _reset_dynamodb_clients_for_tests() -> None:
    _dynamodb_clients.clear()
