"""AWS connection shared by operations providers.

Wraps one boto3 session with the CloudWatch Logs and CloudWatch clients the
operations layer queries. Connections are read-only after construction.
"""

from functools import lru_cache
from typing import Optional
import logging

import boto3

logger = logging.getLogger(__name__)


class AWSConnection:
    """A boto3 session plus the log-query and metric-query clients built from it."""

    def __init__(self, session: boto3.session.Session):
        self.session = session
        self.logs = session.client("logs")
        self.cloudwatch = session.client("cloudwatch")

    @property
    def region(self) -> Optional[str]:
        return self.session.region_name


@lru_cache(maxsize=16)
def get_connection(region: Optional[str] = None, profile: Optional[str] = None) -> AWSConnection:
    """Return the shared connection for a region/profile pair.

    With no region, boto3 resolves it from AWS_REGION, AWS_DEFAULT_REGION or
    the shared config file.
    """
    connection = AWSConnection(boto3.Session(profile_name=profile, region_name=region))
    logger.debug(f"Created AWS connection for region={connection.region} profile={profile}")
    return connection
