"""Least-privilege execution role for the Amplify-hosted frontend.

The role is built purely from resource identities that were already
generated for the stack, so a policy can never reference a resource the
stack does not own. Every identity is validated before any statement is
built: an empty or malformed name inside an ARN would silently turn into a
much broader grant.
"""
from typing import Any, Union

from attrs import define, field
from attrs.validators import instance_of

import common.constants as constants
from common.logger import logger
from common.resource_identity import (
    InvalidResourceIdentityError,
    ResourceIdentity,
    ResourceKind,
    parse_identity,
)

INDEX_STORE_ACTIONS = (
    "dynamodb:GetItem",
    "dynamodb:Query",
    "dynamodb:Scan",
    "dynamodb:BatchGetItem",
)
STORAGE_ACTIONS = (
    "s3:GetObject",
    "s3:ListBucket",
)
READ_ONLY_ACTIONS = frozenset(INDEX_STORE_ACTIONS + STORAGE_ACTIONS)

# Only these wildcard suffixes may appear in a resource ARN.
OBJECTS_SUFFIX = "/*"
INDEXES_SUFFIX = "/index/*"


def _read_only_actions(instance: Any, attribute: Any, value: tuple[str, ...]) -> None:
    if not value:
        raise ValueError("A permission statement needs at least one action")
    forbidden = [action for action in value if action not in READ_ONLY_ACTIONS]
    if forbidden:
        raise ValueError(f"Actions are not read-only: {', '.join(forbidden)}")


def _scoped_resources(instance: Any, attribute: Any, value: tuple[str, ...]) -> None:
    if not value:
        raise ValueError("A permission statement needs at least one resource")
    for resource in value:
        if not isinstance(resource, str) or not resource:
            raise ValueError("Resources must be non-empty strings")
        scope = resource
        for suffix in (INDEXES_SUFFIX, OBJECTS_SUFFIX):
            if scope.endswith(suffix):
                scope = scope[: -len(suffix)]
                break
        if "*" in scope:
            raise ValueError(f"Resource {resource!r} escapes its resource scope")


@define(slots=True, frozen=True)
class PermissionStatement:
    actions: tuple[str, ...] = field(converter=tuple, validator=_read_only_actions)
    resources: tuple[str, ...] = field(converter=tuple, validator=_scoped_resources)
    effect: str = field(default="Allow", init=False)


@define(slots=True, frozen=True)
class AccessRole:
    index_store_access: PermissionStatement = field(
        validator=instance_of(PermissionStatement)
    )
    storage_access: PermissionStatement = field(
        validator=instance_of(PermissionStatement)
    )
    trusted_service: str = field(default=constants.AMPLIFY_SERVICE_PRINCIPAL, init=False)
    description: str = field(default=constants.EXECUTION_ROLE_DESCRIPTION)

    @property
    def statements(self) -> tuple[PermissionStatement, ...]:
        return (self.index_store_access, self.storage_access)

    @property
    def inline_policies(self) -> dict[str, PermissionStatement]:
        return {
            constants.INDEX_STORE_POLICY_NAME: self.index_store_access,
            constants.STORAGE_POLICY_NAME: self.storage_access,
        }


IdentityInput = Union[ResourceIdentity, str]


def _require_identity(value: Any, kind: ResourceKind, label: str) -> ResourceIdentity:
    if isinstance(value, str):
        try:
            value = parse_identity(value)
        except InvalidResourceIdentityError:
            logger.error("Rejected malformed resource identity", role=label, identity=value)
            raise
    elif not isinstance(value, ResourceIdentity):
        raise InvalidResourceIdentityError(
            f"{label} identity must be a ResourceIdentity or name, got {type(value).__name__}"
        )
    if value.kind is not kind:
        raise InvalidResourceIdentityError(
            f"{label} identity must be of kind {kind.value!r}, got {value.kind.value!r}"
        )
    return value


def build_role(
    storage_identity: IdentityInput,
    index_identity: IdentityInput,
    partition: str = constants.DEFAULT_PARTITION,
) -> AccessRole:
    """Build the read-only role for the photo bucket and metadata table.

    Raises:
        InvalidResourceIdentityError: if either identity is empty, malformed,
            of the wrong kind, or the two belong to different environments.
    """
    storage = _require_identity(storage_identity, ResourceKind.PHOTOS, "storage")
    index = _require_identity(index_identity, ResourceKind.PHOTO_METADATA, "index")
    if storage.environment is not index.environment:
        raise InvalidResourceIdentityError(
            "Storage and index identities belong to different environments: "
            f"{storage.environment.value} != {index.environment.value}"
        )

    table_arn = index.arn(partition)
    bucket_arn = storage.arn(partition)
    return AccessRole(
        index_store_access=PermissionStatement(
            actions=INDEX_STORE_ACTIONS,
            resources=(table_arn, f"{table_arn}{INDEXES_SUFFIX}"),
        ),
        storage_access=PermissionStatement(
            actions=STORAGE_ACTIONS,
            resources=(bucket_arn, f"{bucket_arn}{OBJECTS_SUFFIX}"),
        ),
    )
