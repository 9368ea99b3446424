DEFAULT_ENV = "dev"
DEFAULT_REGION = "us-west-2"
ENVIRONMENT_CONTEXT_KEY = "environment"
LOG_SERVICE_NAME = "loubie-designs-infrastructure"

STACK_ID = "LoubieDesignsInfrastructureStack"
STACK_DESCRIPTION = "Infrastructure for Loubie Designs portfolio website"

# Naming convention components
SERVICE_NAME = "loubie-designs"  # Prefix for every physical resource name
SERVICE_ID = "LoubieDesigns"  # Prefix for logical ids and export names
NAME_SEPARATOR = "-"
MAX_RESOURCE_NAME_LENGTH = 63  # S3 bucket names are the strictest consumer

# Resource kind tokens (used in naming)
KIND_PHOTOS = "photos"
KIND_PHOTO_METADATA = "photo-metadata"
KIND_EXECUTION_ROLE = "amplify-role"

# Photo bucket
CORS_MAX_AGE_SECONDS = 3600
INCOMPLETE_UPLOAD_RULE_ID = "DeleteIncompleteMultipartUploads"
INCOMPLETE_UPLOAD_EXPIRY_DAYS = 7

# Photo metadata table
PRIMARY_KEY = "id"
CREATED_AT_ATTRIBUTE = "createdAt"

# Access role
DEFAULT_PARTITION = "aws"
AMPLIFY_SERVICE_PRINCIPAL = "amplify.amazonaws.com"
EXECUTION_ROLE_DESCRIPTION = "Execution role for Loubie Designs Amplify app"
INDEX_STORE_POLICY_NAME = "DynamoDBAccess"
STORAGE_POLICY_NAME = "S3Access"
