"""Import batch defaults."""

from __future__ import annotations

from dataclasses import dataclass

from contentsync.domain.reconciliation.index import DuplicatePolicy

from .env import env_flag, optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ImportConfig:
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.STRICT
    fail_fast: bool = False
    default_owner: str | None = None


def parse_duplicate_policy(value: str) -> DuplicatePolicy:
    try:
        return DuplicatePolicy(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in DuplicatePolicy)
        raise ConfigurationError(
            f"Invalid duplicate policy: {value} (expected one of {choices})"
        ) from exc


def get_import_config() -> ImportConfig:
    policy = optional_env_var("CONTENTSYNC_DUPLICATE_POLICY")
    return ImportConfig(
        duplicate_policy=(
            parse_duplicate_policy(policy) if policy is not None else DuplicatePolicy.STRICT
        ),
        fail_fast=env_flag("CONTENTSYNC_FAIL_FAST"),
        default_owner=optional_env_var("CONTENTSYNC_DEFAULT_OWNER"),
    )
