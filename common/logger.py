import os

from aws_lambda_powertools import Logger

import common.constants as constants

logger: Logger = Logger(
    service=constants.LOG_SERVICE_NAME, level=os.getenv("LOG_LEVEL", "INFO").upper()
)
