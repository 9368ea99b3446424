"""Deployment environment profiles and the per-environment CORS origin table.

The resolved profile parameterizes resource naming, exports and the set of
browser origins allowed to read photos from the bucket. Resolution never
fails: anything that is not a declared profile falls back to ``dev``.
"""
from enum import Enum
from typing import Any, Iterator, Mapping, Optional
from urllib.parse import urlsplit

from attrs import define, field
from attrs.validators import instance_of

import common.constants as constants
from common.logger import logger


class EnvironmentProfile(str, Enum):
    DEV = "dev"
    PROD = "prod"


DEFAULT_PROFILE = EnvironmentProfile(constants.DEFAULT_ENV)

ALLOWED_ORIGINS: Mapping[EnvironmentProfile, tuple[str, ...]] = {
    EnvironmentProfile.DEV: (
        "http://localhost:5173",
        "http://localhost:3000",
    ),
    EnvironmentProfile.PROD: (
        "https://www.loubie-designs.com",
        "https://loubie-designs.com",
        "https://stage.d2qtl7pvprqis4.amplifyapp.com",
    ),
}

# Profiles missing from ALLOWED_ORIGINS get the dev origins.
FALLBACK_ORIGINS_PROFILE = EnvironmentProfile.DEV


def resolve_environment(requested: Optional[Any]) -> EnvironmentProfile:
    """Map a requested environment name to a declared profile.

    Matching ignores case and surrounding whitespace. Missing, empty or
    unknown values resolve to the default profile instead of raising, so a
    typo in ``-c environment=...`` deploys with dev naming; the fallback is
    logged as a warning.
    """
    if isinstance(requested, EnvironmentProfile):
        return requested
    if requested is None or (isinstance(requested, str) and not requested.strip()):
        logger.info(
            "No environment requested, using default",
            environment=DEFAULT_PROFILE.value,
        )
        return DEFAULT_PROFILE
    if isinstance(requested, str):
        candidate = requested.strip().lower()
        for profile in EnvironmentProfile:
            if profile.value == candidate:
                return profile
    logger.warning(
        "Unrecognized environment, falling back to default",
        requested=repr(requested),
        environment=DEFAULT_PROFILE.value,
    )
    return DEFAULT_PROFILE


def is_well_formed_origin(origin: Any) -> bool:
    """Return True for ``scheme://host[:port]`` with an http(s) scheme."""
    if not isinstance(origin, str) or origin != origin.strip():
        return False
    try:
        parts = urlsplit(origin)
        parts.port
    except ValueError:
        return False
    return (
        parts.scheme in ("http", "https")
        and bool(parts.hostname)
        and "*" not in parts.netloc
        and parts.username is None
        and not parts.path
        and not parts.query
        and not parts.fragment
    )


def _validate_origins(instance: Any, attribute: Any, value: tuple[str, ...]) -> None:
    if not value:
        raise ValueError("An origin set must contain at least one origin")
    for origin in value:
        if not is_well_formed_origin(origin):
            raise ValueError(f"Malformed origin {origin!r} in {attribute.name}")


@define(slots=True, frozen=True)
class OriginSet:
    profile: EnvironmentProfile = field(validator=instance_of(EnvironmentProfile))
    origins: tuple[str, ...] = field(converter=tuple, validator=_validate_origins)

    def __iter__(self) -> Iterator[str]:
        return iter(self.origins)

    def __len__(self) -> int:
        return len(self.origins)

    def joined(self, separator: str = ", ") -> str:
        return separator.join(self.origins)


def origins_for(profile: EnvironmentProfile) -> OriginSet:
    """Return the origins allowed to read stored photos for ``profile``."""
    origins = ALLOWED_ORIGINS.get(profile)
    if origins is None:
        logger.warning(
            "No origins declared for environment, using fallback origins",
            environment=profile.value,
            fallback=FALLBACK_ORIGINS_PROFILE.value,
        )
        origins = ALLOWED_ORIGINS[FALLBACK_ORIGINS_PROFILE]
    return OriginSet(profile=profile, origins=origins)
