from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Stack,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_dynamodb as dynamodb,
    aws_iam as iam,
    aws_s3 as s3,
)
from constructs import Construct

import common.constants as constants
from common.access_policy import AccessRole, PermissionStatement, build_role
from common.environment import OriginSet, origins_for
from common.index_topology import IndexDefinition, index_topology
from common.logger import logger
from common.resource_identity import ResourceIdentity, ResourceKind
from common.stack_context import StackContext


class LoubieDesignsInfrastructureStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.context = StackContext.from_scope(self)
        self.environment_profile = self.context.env
        self.allowed_origins = origins_for(self.environment_profile)

        # Physical names, computed before any resource or policy references them
        self.photo_bucket_identity = self.context.build_identity(ResourceKind.PHOTOS)
        self.photo_metadata_table_identity = self.context.build_identity(
            ResourceKind.PHOTO_METADATA
        )
        self.execution_role_identity = self.context.build_identity(
            ResourceKind.EXECUTION_ROLE
        )

        # S3 bucket for storing photos
        self.photo_bucket = self._build_photo_bucket(
            identity=self.photo_bucket_identity, allowed_origins=self.allowed_origins
        )

        # CloudFront in front of the private bucket
        self.origin_access_identity = self._build_origin_access_identity()
        self.photo_bucket.grant_read(self.origin_access_identity)
        self.photo_distribution = self._build_photo_distribution(
            bucket=self.photo_bucket, origin_access_identity=self.origin_access_identity
        )

        # DynamoDB table for photo metadata
        self.photo_metadata_table = self._build_photo_metadata_table(
            identity=self.photo_metadata_table_identity, indexes=index_topology()
        )

        # Permissions
        self.access_role = build_role(
            self.photo_bucket_identity,
            self.photo_metadata_table_identity,
            partition=self.context.aws_partition,
        )
        self.amplify_execution_role = self._build_amplify_execution_role(
            identity=self.execution_role_identity, access_role=self.access_role
        )

        self._build_outputs()
        logger.info(
            "Assembled infrastructure stack",
            stack=construct_id,
            environment=self.environment_profile.value,
            allowed_origins=list(self.allowed_origins),
        )

    # Resource creation

    def _build_photo_bucket(
        self, identity: ResourceIdentity, allowed_origins: OriginSet
    ) -> s3.Bucket:
        """Create the private photo bucket; photos are kept on stack deletion."""
        return s3.Bucket(
            self,
            self.context.build_resource_id("PhotoBucket"),
            bucket_name=identity.name,
            public_read_access=False,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            cors=[
                s3.CorsRule(
                    allowed_origins=list(allowed_origins),
                    allowed_methods=[s3.HttpMethods.GET],
                    allowed_headers=["*"],
                    max_age=constants.CORS_MAX_AGE_SECONDS,
                )
            ],
            lifecycle_rules=[
                s3.LifecycleRule(
                    id=constants.INCOMPLETE_UPLOAD_RULE_ID,
                    abort_incomplete_multipart_upload_after=Duration.days(
                        constants.INCOMPLETE_UPLOAD_EXPIRY_DAYS
                    ),
                )
            ],
            versioned=False,
            removal_policy=RemovalPolicy.RETAIN,
        )

    def _build_origin_access_identity(self) -> cloudfront.OriginAccessIdentity:
        return cloudfront.OriginAccessIdentity(
            self,
            self.context.build_resource_id("PhotoBucketOAI"),
            comment="OAI for Loubie Designs photo bucket",
        )

    def _build_photo_distribution(
        self,
        bucket: s3.IBucket,
        origin_access_identity: cloudfront.IOriginAccessIdentity,
    ) -> cloudfront.Distribution:
        """Serve photos over HTTPS from North America and Europe edge locations."""
        return cloudfront.Distribution(
            self,
            self.context.build_resource_id("PhotoDistribution"),
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_identity(
                    bucket,
                    origin_access_identity=origin_access_identity,
                ),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                cache_policy=cloudfront.CachePolicy.CACHING_OPTIMIZED,
                compress=True,
            ),
            price_class=cloudfront.PriceClass.PRICE_CLASS_100,
            enable_ipv6=True,
            comment="Loubie Designs Photo CDN",
        )

    def _build_photo_metadata_table(
        self, identity: ResourceIdentity, indexes: tuple[IndexDefinition, ...]
    ) -> dynamodb.Table:
        photo_metadata_table = dynamodb.Table(
            self,
            self.context.build_resource_id("PhotoMetadataTable"),
            table_name=identity.name,
            partition_key=dynamodb.Attribute(
                name=constants.PRIMARY_KEY,
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery_specification=dynamodb.PointInTimeRecoverySpecification(
                point_in_time_recovery_enabled=True,
            ),
            removal_policy=RemovalPolicy.RETAIN,
        )
        for index in indexes:
            photo_metadata_table.add_global_secondary_index(
                index_name=index.index_name,
                partition_key=dynamodb.Attribute(
                    name=index.partition_key,
                    type=dynamodb.AttributeType.STRING,
                ),
                sort_key=dynamodb.Attribute(
                    name=index.sort_key,
                    type=dynamodb.AttributeType.STRING,
                ),
            )
        return photo_metadata_table

    @staticmethod
    def _to_policy_document(statement: PermissionStatement) -> iam.PolicyDocument:
        return iam.PolicyDocument(
            statements=[
                iam.PolicyStatement(
                    effect=iam.Effect.ALLOW,
                    actions=list(statement.actions),
                    resources=list(statement.resources),
                )
            ]
        )

    def _build_amplify_execution_role(
        self, identity: ResourceIdentity, access_role: AccessRole
    ) -> iam.Role:
        """IAM role the Amplify app assumes to read photos and their metadata."""
        return iam.Role(
            self,
            self.context.build_resource_id("AmplifyExecutionRole"),
            role_name=identity.name,
            assumed_by=iam.ServicePrincipal(access_role.trusted_service),
            description=access_role.description,
            inline_policies={
                policy_name: self._to_policy_document(statement)
                for policy_name, statement in access_role.inline_policies.items()
            },
        )

    def _build_outputs(self) -> None:
        environment = self.environment_profile.value
        outputs = (
            ("Environment", "Environment", environment, "Deployment environment"),
            (
                "AllowedOrigins",
                "AllowedOrigins",
                self.allowed_origins.joined(),
                f"Allowed CORS origins for {environment} environment",
            ),
            (
                "PhotoBucketName",
                "PhotoBucketName",
                self.photo_bucket.bucket_name,
                "S3 bucket name for photos",
            ),
            (
                "PhotoDistributionDomain",
                "PhotoCDN",
                self.photo_distribution.distribution_domain_name,
                "CloudFront distribution domain for photos",
            ),
            (
                "PhotoMetadataTableName",
                "MetadataTableName",
                self.photo_metadata_table.table_name,
                "DynamoDB table name for photo metadata",
            ),
            (
                "AmplifyExecutionRoleArn",
                "AmplifyRoleArn",
                self.amplify_execution_role.role_arn,
                "IAM role ARN for Amplify app",
            ),
            ("Region", "Region", self.context.aws_region, "AWS region"),
        )
        for output_id, export_id, value, description in outputs:
            CfnOutput(
                self,
                output_id,
                value=value,
                description=description,
                export_name=self.context.build_export_name(export_id),
            )
