from attrs import define, field
from aws_cdk import Stack
from constructs import Construct

import common.constants as constants
from common.environment import DEFAULT_PROFILE, EnvironmentProfile, resolve_environment
from common.resource_identity import ResourceIdentity, ResourceKind, identity_for


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    env: EnvironmentProfile = field(
        default=DEFAULT_PROFILE,
        converter=resolve_environment,
        metadata={"description": "Deployment environment (dev, prod)"},
    )
    service: str = field(default=constants.SERVICE_ID, init=False)

    @classmethod
    def from_scope(cls, scope: Construct) -> "StackContext":
        """Resolve the environment from the ``environment`` CDK context value."""
        stack = Stack.of(scope)
        return cls(
            scope=stack,
            env=stack.node.try_get_context(constants.ENVIRONMENT_CONTEXT_KEY),
        )

    @property
    def aws_account_id(self) -> str:
        return Stack.of(self.scope).account

    @property
    def aws_region(self) -> str:
        return Stack.of(self.scope).region

    @property
    def aws_partition(self) -> str:
        return Stack.of(self.scope).partition

    # ---------- naming ----------
    def build_identity(self, kind: ResourceKind) -> ResourceIdentity:
        """Physical name for ``kind`` in this stack's environment, account and region.

        Examples:
            - loubie-designs-photos-dev-123456789012-us-west-2
            - loubie-designs-amplify-role-prod-123456789012-us-west-2
        """
        return identity_for(kind, self.env, self.aws_account_id, self.aws_region)

    def build_resource_id(self, resource_type: str) -> str:
        """Build a construct id, e.g. PhotoBucket -> LoubieDesignsPhotoBucket."""
        return f"{self.service}{resource_type[:1].upper()}{resource_type[1:]}"

    def build_export_name(self, output_name: str) -> str:
        """Build an environment-qualified export, e.g. LoubieDesigns-Region-dev."""
        return f"{self.service}-{output_name}-{self.env.value}"
