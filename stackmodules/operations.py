"""Operations provider for framework components.

Answers operational requests about a component (logs, supported metrics,
metric statistics) by dispatching on its virtual type to the matching
CloudWatch Logs or CloudWatch query.

Supported today:
- Logs: Function components (and every function of a stack)
- Metric names: every component type
- Metric statistics: Function components
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence
import logging

from botocore.exceptions import BotoCoreError, ClientError

import stackmodules.config.aws_framework as framework_config
from stackmodules.component import (
    Component,
    Components,
    LogEntry,
    LogQuery,
    MetricDataPoint,
    MetricName,
    MetricRequest,
    VirtualType,
)
from stackmodules.connection import AWSConnection
from stackmodules.exceptions import (
    ContractViolationError,
    LogsNotSupportedError,
    MetricQueryError,
)
from stackmodules.extractor import functions_of
from stackmodules.logfetch import fetch_logs

logger = logging.getLogger(__name__)


def _virtual_type(component: Component) -> VirtualType:
    if not isinstance(component.type, VirtualType):
        raise ContractViolationError(
            "Unknown component type", {"type": component.type, "urn": component.urn}
        )
    return component.type


def function_name(component: Component) -> str:
    """Lambda function name backing a Function component."""
    record = component.resources.get("function")
    if record is None:
        raise ContractViolationError(
            "Function component has no function resource", {"urn": component.urn}
        )
    return record.id or record.output_str("name") or record.name


def _require_default_query(query: Optional[LogQuery]) -> None:
    if query is not None and not query.is_default():
        raise NotImplementedError("Filtered log queries are not yet implemented")


class OperationsProvider:
    """Per-component facade answering log and metric requests."""

    def __init__(self, connection: Optional[AWSConnection], component: Component):
        self.connection = connection
        self.component = component

    @classmethod
    def for_component(
        cls, connection: Optional[AWSConnection], component: Component
    ) -> "OperationsProvider":
        """Bind a connection to one component.

        The connection may be None when only list_metrics() is needed.
        """
        return cls(connection, component)

    def get_logs(self, query: Optional[LogQuery] = None) -> List[LogEntry]:
        """Return the component's log entries in ascending timestamp order.

        Raises:
            LogsNotSupportedError: Component type has no logs
            NotImplementedError: A non-default query was requested
        """
        virtual_type = _virtual_type(self.component)
        if virtual_type is not VirtualType.FUNCTION:
            raise LogsNotSupportedError(
                "Logs not supported for component type",
                {"type": virtual_type.kind, "urn": self.component.urn},
            )
        _require_default_query(query)
        return fetch_logs(self.connection, [function_name(self.component)])

    def list_metrics(self) -> List[MetricName]:
        """Return the metric names supported for the component's type."""
        virtual_type = _virtual_type(self.component)
        metrics = framework_config.COMPONENT_METRICS.get(virtual_type.value)
        if metrics is None:
            raise ContractViolationError(
                "No metrics defined for component type", {"type": virtual_type.value}
            )
        return list(metrics)

    def _dimensions(self, virtual_type: VirtualType) -> List[Dict[str, str]]:
        if virtual_type is VirtualType.FUNCTION:
            return [{"Name": "FunctionName", "Value": function_name(self.component)}]
        # TODO: map ApiName/Stage, TopicName, RuleName and TableName dimensions
        # for the remaining component types.
        raise NotImplementedError(
            f"Metric statistics for {virtual_type.kind} components are not yet implemented"
        )

    def get_metric_statistics(self, request: MetricRequest) -> List[MetricDataPoint]:
        """Query CloudWatch statistics for one metric of the component.

        Missing time bounds default to the last hour; the period defaults to
        one minute.

        Raises:
            NotImplementedError: Component type is not a Function
            MetricQueryError: CloudWatch call failed
        """
        virtual_type = _virtual_type(self.component)
        dimensions = self._dimensions(virtual_type)

        end_time = request.end_time or datetime.now(timezone.utc)
        start_time = request.start_time or end_time - timedelta(
            seconds=framework_config.DEFAULT_METRIC_WINDOW_SECONDS
        )
        period = request.period or framework_config.DEFAULT_METRIC_PERIOD_SECONDS
        try:
            response = self.connection.cloudwatch.get_metric_statistics(
                Namespace=framework_config.METRIC_NAMESPACES[virtual_type.value],
                MetricName=request.name,
                Dimensions=dimensions,
                StartTime=start_time,
                EndTime=end_time,
                Period=period,
                Statistics=framework_config.METRIC_STATISTICS,
            )
        except (ClientError, BotoCoreError) as e:
            raise MetricQueryError(
                "Metric statistics query failed",
                {"metric": request.name, "urn": self.component.urn, "error": e},
            ) from e

        datapoints = sorted(response.get("Datapoints", []), key=lambda dp: dp["Timestamp"])
        return [
            MetricDataPoint(
                timestamp=dp["Timestamp"],
                unit=dp.get("Unit", ""),
                sum=dp.get("Sum", 0.0),
                sample_count=dp.get("SampleCount", 0.0),
                average=dp.get("Average", 0.0),
                maximum=dp.get("Maximum", 0.0),
                minimum=dp.get("Minimum", 0.0),
            )
            for dp in datapoints
        ]


class StackOperationsProvider:
    """Operations over every component of a stack at once."""

    def __init__(self, connection: AWSConnection, components: Components):
        self.connection = connection
        self.components = components

    def functions(self) -> Sequence[Component]:
        return functions_of(self.components)

    def get_logs(self, query: Optional[LogQuery] = None) -> List[LogEntry]:
        """Logs of all functions in the stack, merged in timestamp order."""
        _require_default_query(query)
        names = [function_name(component) for component in self.functions()]
        logger.debug(f"[get_logs] Fetching logs for {len(names)} functions")
        return fetch_logs(self.connection, names)
