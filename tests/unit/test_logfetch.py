"""Unit tests for stackmodules/logfetch.py"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "fixtures"))

from snapshot_samples import lambda_line, log_event
from stackmodules.component import LogEntry
from stackmodules.logfetch import (
    fetch_function_logs,
    fetch_logs,
    log_group_name,
    parse_log_message,
    read_log_stream,
)


def client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "not found"}}, operation
    )


def fake_connection(streams, events):
    """Build a connection whose logs client serves canned streams and events.

    Args:
        streams: log group -> list of stream names (or an exception to raise)
        events: (log group, stream) -> list of events (or an exception to raise)
    """
    connection = MagicMock()

    def paginate(logGroupName):
        result = streams.get(logGroupName, [])
        if isinstance(result, Exception):
            raise result
        return [{"logStreams": [{"logStreamName": name} for name in result]}]

    def get_log_events(logGroupName, logStreamName, startFromHead, nextToken=None):
        result = events.get((logGroupName, logStreamName), [])
        if isinstance(result, Exception):
            raise result
        return {"events": result}

    connection.logs.get_paginator.return_value.paginate.side_effect = paginate
    connection.logs.get_log_events.side_effect = get_log_events
    return connection


class TestParseLogMessage(unittest.TestCase):
    def test_lambda_line(self):
        self.assertEqual(parse_log_message(lambda_line("hello world")), "hello world")

    def test_tab_in_message_kept(self):
        self.assertEqual(parse_log_message(lambda_line("a\tb")), "a\tb")

    def test_runtime_lines_dropped(self):
        self.assertIsNone(parse_log_message("START RequestId: 1234 Version: $LATEST\n"))
        self.assertIsNone(parse_log_message("END RequestId: 1234\n"))
        self.assertIsNone(parse_log_message(""))

    def test_log_group_name(self):
        self.assertEqual(log_group_name("worker-123"), "/aws/lambda/worker-123")


class TestReadLogStream(unittest.TestCase):
    def test_non_matching_lines_dropped(self):
        connection = fake_connection(
            {},
            {
                ("/aws/lambda/fn", "s1"): [
                    log_event(1, "START RequestId: abc Version: $LATEST\n"),
                    log_event(2, lambda_line("kept")),
                    log_event(3, "REPORT RequestId: abc Duration: 2 ms\n"),
                ]
            },
        )
        entries = read_log_stream(connection, "fn", "s1")
        self.assertEqual(entries, [LogEntry(id="fn", timestamp=2, message="kept")])

    def test_follows_forward_token(self):
        connection = MagicMock()
        pages = {
            None: {"events": [log_event(1, lambda_line("one"))], "nextForwardToken": "f/1"},
            "f/1": {"events": [log_event(2, lambda_line("two"))], "nextForwardToken": "f/2"},
            "f/2": {"events": [], "nextForwardToken": "f/2"},
        }
        connection.logs.get_log_events.side_effect = lambda **kw: pages[kw.get("nextToken")]
        entries = read_log_stream(connection, "fn", "s1")
        self.assertEqual([e.message for e in entries], ["one", "two"])
        self.assertEqual(connection.logs.get_log_events.call_count, 3)
        first_call = connection.logs.get_log_events.call_args_list[0].kwargs
        self.assertEqual(first_call["logGroupName"], "/aws/lambda/fn")
        self.assertTrue(first_call["startFromHead"])

    def test_error_yields_no_entries(self):
        connection = fake_connection({}, {("/aws/lambda/fn", "s1"): client_error("GetLogEvents")})
        with self.assertLogs("stackmodules.logfetch", level="DEBUG"):
            self.assertEqual(read_log_stream(connection, "fn", "s1"), [])


class TestFetchLogs(unittest.TestCase):
    def test_merged_and_sorted_across_functions_and_streams(self):
        connection = fake_connection(
            {"/aws/lambda/a": ["s1", "s2"], "/aws/lambda/b": ["s1"]},
            {
                ("/aws/lambda/a", "s1"): [log_event(30, lambda_line("a30")), log_event(50, lambda_line("a50"))],
                ("/aws/lambda/a", "s2"): [log_event(10, lambda_line("a10"))],
                ("/aws/lambda/b", "s1"): [log_event(20, lambda_line("b20")), log_event(40, lambda_line("b40"))],
            },
        )
        entries = fetch_logs(connection, ["a", "b"])
        self.assertEqual([e.timestamp for e in entries], [10, 20, 30, 40, 50])
        self.assertEqual([e.message for e in entries], ["a10", "b20", "a30", "b40", "a50"])
        self.assertEqual({e.id for e in entries}, {"a", "b"})

    def test_equal_timestamps_keep_function_order(self):
        connection = fake_connection(
            {"/aws/lambda/a": ["s"], "/aws/lambda/b": ["s"]},
            {
                ("/aws/lambda/a", "s"): [log_event(5, lambda_line("from a"))],
                ("/aws/lambda/b", "s"): [log_event(5, lambda_line("from b"))],
            },
        )
        entries = fetch_logs(connection, ["a", "b"])
        self.assertEqual([e.message for e in entries], ["from a", "from b"])

    def test_failing_function_degrades_gracefully(self):
        connection = fake_connection(
            {"/aws/lambda/broken": client_error("DescribeLogStreams"), "/aws/lambda/ok": ["s"]},
            {("/aws/lambda/ok", "s"): [log_event(1, lambda_line("fine"))]},
        )
        entries = fetch_logs(connection, ["broken", "ok"])
        self.assertEqual(entries, [LogEntry(id="ok", timestamp=1, message="fine")])

    def test_failing_stream_degrades_gracefully(self):
        connection = fake_connection(
            {"/aws/lambda/fn": ["bad", "good"]},
            {
                ("/aws/lambda/fn", "bad"): client_error("GetLogEvents"),
                ("/aws/lambda/fn", "good"): [log_event(7, lambda_line("ok"))],
            },
        )
        entries = fetch_function_logs(connection, "fn")
        self.assertEqual([e.message for e in entries], ["ok"])

    def test_no_functions(self):
        connection = MagicMock()
        self.assertEqual(fetch_logs(connection, []), [])
        connection.logs.get_paginator.assert_not_called()

    def test_bounded_workers(self):
        connection = fake_connection(
            {"/aws/lambda/fn": ["s1", "s2", "s3"]},
            {("/aws/lambda/fn", s): [log_event(i, lambda_line(s))] for i, s in enumerate(["s3", "s2", "s1"])},
        )
        entries = fetch_logs(connection, ["fn"], max_workers=1)
        self.assertEqual([e.message for e in entries], ["s3", "s2", "s1"])


if __name__ == "__main__":
    unittest.main()
