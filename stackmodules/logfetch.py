"""
Concurrent log retrieval from CloudWatch Logs.

Fan-out/fan-in: one task per function lists its log streams, then one nested
task per stream reads every event in that stream. Results are merged only
after all tasks finish and are returned in ascending timestamp order.

A failing function or stream contributes no entries; the error is logged at
DEBUG level and the rest of the fetch carries on.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional
import logging
import re

from botocore.exceptions import BotoCoreError, ClientError

import stackmodules.config.aws_framework as framework_config
from stackmodules.component import LogEntry
from stackmodules.connection import AWSConnection

logger = logging.getLogger(__name__)

LOG_LINE_RE = re.compile(framework_config.LOG_LINE_PATTERN)


def parse_log_message(message: str) -> Optional[str]:
    """Strip the Lambda timestamp/request-id prefix from a raw log line.

    Returns:
        The trailing message text, or None when the line has no such prefix
    """
    match = LOG_LINE_RE.search(message or "")
    if match is None:
        return None
    return match.group(1)


def log_group_name(function_name: str) -> str:
    return framework_config.LOG_GROUP_PREFIX + function_name


def list_log_streams(connection: AWSConnection, function_name: str) -> List[str]:
    group = log_group_name(function_name)
    paginator = connection.logs.get_paginator("describe_log_streams")
    names = []
    for page in paginator.paginate(logGroupName=group):
        for stream in page.get("logStreams", []):
            names.append(stream["logStreamName"])
    logger.debug(f"[get_logs] {len(names)} log streams in {group}")
    return names


def read_log_stream(
    connection: AWSConnection, function_name: str, stream_name: str
) -> List[LogEntry]:
    """Read all events of one stream and keep the lines matching LOG_LINE_RE."""
    params = {
        "logGroupName": log_group_name(function_name),
        "logStreamName": stream_name,
        "startFromHead": True,
    }
    entries = []
    try:
        while True:
            response = connection.logs.get_log_events(**params)
            for event in response.get("events", []):
                message = parse_log_message(event.get("message", ""))
                if message is not None:
                    entries.append(
                        LogEntry(
                            id=function_name,
                            timestamp=int(event.get("timestamp", 0)),
                            message=message,
                        )
                    )
            token = response.get("nextForwardToken")
            # The forward token repeats once the end of the stream is reached
            if not token or token == params.get("nextToken"):
                break
            params["nextToken"] = token
    except (ClientError, BotoCoreError) as e:
        logger.debug(f"[get_logs] Error getting logs: {function_name} {stream_name} {e}")
        return []
    return entries


def fetch_function_logs(
    connection: AWSConnection, function_name: str, max_workers: Optional[int] = None
) -> List[LogEntry]:
    """Fetch the logs of one function, reading its streams concurrently."""
    try:
        streams = list_log_streams(connection, function_name)
    except (ClientError, BotoCoreError) as e:
        logger.debug(f"[get_logs] Error listing log streams: {function_name} {e}")
        return []
    if not streams:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(read_log_stream, connection, function_name, stream)
            for stream in streams
        ]
        results = [future.result() for future in futures]
    return [entry for result in results for entry in result]


def fetch_logs(
    connection: AWSConnection,
    function_names: Iterable[str],
    max_workers: Optional[int] = None,
) -> List[LogEntry]:
    """Fetch logs for several functions concurrently.

    Args:
        connection: Shared AWS connection
        function_names: Lambda function names
        max_workers: Thread cap per fan-out level (executor default if None)

    Returns:
        All matching log entries, stably sorted by timestamp
    """
    names = list(function_names)
    if not names:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(fetch_function_logs, connection, name, max_workers)
            for name in names
        ]
        results = [future.result() for future in futures]
    entries = [entry for result in results for entry in result]
    entries.sort(key=lambda entry: entry.timestamp)
    return entries
