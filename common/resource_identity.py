"""Deterministic, environment-scoped physical names for provisioned resources.

Every name has the shape ``loubie-designs-<kind>-<environment>-<account>-<region>``.
Because the environment is a fixed segment, two environments deployed to the
same account and region never produce the same name for a resource kind.
Names follow the S3 bucket naming rules (the strictest consumer), so the same
format is safe for DynamoDB tables and IAM roles.

Account and region may be unresolved CDK tokens when a stack is synthesized
without an explicit environment; those segments are passed through untouched
and CloudFormation resolves them at deploy time.
"""
import re
from enum import Enum
from typing import Any

from attrs import define, field
from attrs.validators import instance_of
from aws_cdk import Token

import common.constants as constants
from common.environment import EnvironmentProfile


class InvalidResourceIdentityError(ValueError):
    """Raised when a resource identity is empty or does not match the naming format."""


class ResourceKind(str, Enum):
    PHOTOS = constants.KIND_PHOTOS
    PHOTO_METADATA = constants.KIND_PHOTO_METADATA
    EXECUTION_ROLE = constants.KIND_EXECUTION_ROLE


ACCOUNT_PATTERN = re.compile(r"\d{12}")
REGION_PATTERN = re.compile(r"[a-z]{2}(?:-[a-z]+)+-\d+")

_KINDS = "|".join(
    re.escape(kind.value) for kind in sorted(ResourceKind, key=lambda k: -len(k.value))
)
_ENVIRONMENTS = "|".join(re.escape(profile.value) for profile in EnvironmentProfile)
NAME_PATTERN = re.compile(
    rf"{re.escape(constants.SERVICE_NAME)}-(?P<kind>{_KINDS})-(?P<environment>{_ENVIRONMENTS})"
    rf"-(?P<account>{ACCOUNT_PATTERN.pattern})-(?P<region>{REGION_PATTERN.pattern})"
)


def _normalize_coordinate(value: Any) -> Any:
    if isinstance(value, str) and not Token.is_unresolved(value):
        return value.strip().lower()
    return value


def _coordinate_validator(pattern: re.Pattern, label: str):
    def validate(instance: Any, attribute: Any, value: Any) -> None:
        if not isinstance(value, str) or not value:
            raise InvalidResourceIdentityError(f"AWS {label} must be a non-empty string")
        if Token.is_unresolved(value):
            return
        if not pattern.fullmatch(value):
            raise InvalidResourceIdentityError(f"Malformed AWS {label}: {value!r}")

    return validate


@define(slots=True, frozen=True)
class ResourceIdentity:
    kind: ResourceKind = field(validator=instance_of(ResourceKind))
    environment: EnvironmentProfile = field(validator=instance_of(EnvironmentProfile))
    account: str = field(
        converter=_normalize_coordinate,
        validator=_coordinate_validator(ACCOUNT_PATTERN, "account"),
    )
    region: str = field(
        converter=_normalize_coordinate,
        validator=_coordinate_validator(REGION_PATTERN, "region"),
    )

    def __attrs_post_init__(self) -> None:
        if self.is_resolved and len(self.name) > constants.MAX_RESOURCE_NAME_LENGTH:
            raise InvalidResourceIdentityError(
                f"Resource name {self.name!r} exceeds "
                f"{constants.MAX_RESOURCE_NAME_LENGTH} characters"
            )

    @property
    def is_resolved(self) -> bool:
        return not (Token.is_unresolved(self.account) or Token.is_unresolved(self.region))

    @property
    def name(self) -> str:
        return constants.NAME_SEPARATOR.join(
            [
                constants.SERVICE_NAME,
                self.kind.value,
                self.environment.value,
                self.account,
                self.region,
            ]
        )

    def arn(self, partition: str = constants.DEFAULT_PARTITION) -> str:
        if self.kind is ResourceKind.PHOTOS:
            return f"arn:{partition}:s3:::{self.name}"
        if self.kind is ResourceKind.PHOTO_METADATA:
            return f"arn:{partition}:dynamodb:{self.region}:{self.account}:table/{self.name}"
        return f"arn:{partition}:iam::{self.account}:role/{self.name}"

    def __str__(self) -> str:
        return self.name


def identity_for(
    kind: ResourceKind, profile: EnvironmentProfile, account: str, region: str
) -> ResourceIdentity:
    """Build the physical name of ``kind`` for one environment/account/region.

    Examples:
        - loubie-designs-photos-dev-123456789012-us-west-2
        - loubie-designs-photo-metadata-prod-123456789012-us-west-2
    """
    return ResourceIdentity(kind=kind, environment=profile, account=account, region=region)


def parse_identity(name: Any) -> ResourceIdentity:
    """Rebuild a ResourceIdentity from a literal name produced by identity_for."""
    if not isinstance(name, str) or not name:
        raise InvalidResourceIdentityError("Resource identity must be a non-empty string")
    match = NAME_PATTERN.fullmatch(name)
    if match is None:
        raise InvalidResourceIdentityError(
            f"Resource identity {name!r} does not match the naming format"
        )
    return identity_for(
        ResourceKind(match["kind"]),
        EnvironmentProfile(match["environment"]),
        match["account"],
        match["region"],
    )
