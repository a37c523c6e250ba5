"""
Framework components and operational query types.

A component is a virtual node grouping one or more raw AWS resources under a
recognizable capability (an HTTP endpoint, a timer, a table, a topic or a
function). Components are rebuilt from scratch on every extraction pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import stackmodules.config.aws_framework as framework_config
from stackmodules.resources import ResourceRecord


class VirtualType(Enum):
    """Component types synthesized from raw resources"""

    ENDPOINT = framework_config.ENDPOINT_COMPONENT
    TIMER = framework_config.TIMER_COMPONENT
    TABLE = framework_config.TABLE_COMPONENT
    TOPIC = framework_config.TOPIC_COMPONENT
    FUNCTION = framework_config.FUNCTION_COMPONENT

    @property
    def kind(self) -> str:
        """Short name, e.g. 'Endpoint'."""
        return self.value.rsplit(":", 1)[-1]


@dataclass(frozen=True)
class Component:
    """
    A synthesized framework component.

    Args:
        type: Virtual type of the component
        urn: Synthesized identity, unique across one extraction pass
        properties: Derived values (url, schedule, primaryKey, ...)
        resources: Logical role -> underlying record, None when not tracked

    Both maps are copied into read-only views at construction.
    """

    type: VirtualType
    urn: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    resources: Mapping[str, Optional[ResourceRecord]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))

    def __hash__(self):
        return hash((self.type, self.urn))

    @property
    def name(self) -> str:
        return self.urn.split("::")[-1]

    def populated_roles(self) -> Dict[str, ResourceRecord]:
        return {role: res for role, res in self.resources.items() if res is not None}


Components = Dict[str, Component]

MetricName = str


@dataclass(frozen=True)
class LogQuery:
    """Log query parameters. Only the empty query is supported today."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    query: Optional[str] = None

    def is_default(self) -> bool:
        return self.start_time is None and self.end_time is None and not self.query


@dataclass(frozen=True)
class LogEntry:
    """A row in the logs of a running function."""

    id: str
    timestamp: int
    message: str


@dataclass(frozen=True)
class MetricRequest:
    name: MetricName
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    period: Optional[int] = None


@dataclass(frozen=True)
class MetricDataPoint:
    timestamp: datetime
    unit: str
    sum: float
    sample_count: float
    average: float
    maximum: float
    minimum: float


def make_component_urn(source_urn: str, virtual_type: VirtualType, name: str) -> str:
    """Derive a component URN from the URN of the resource that triggered it.

    The stack/project prefix of the source URN is kept and the type and name
    segments are replaced, so "urn:pulumi:dev::todo::aws:sns/topic:Topic::x"
    becomes "urn:pulumi:dev::todo::pulumi:framework:Topic::<name>".

    Args:
        source_urn: URN of the raw resource (may be empty)
        virtual_type: Component type
        name: Component name

    Returns:
        Synthesized URN string
    """
    parts = source_urn.split("::") if source_urn else []
    if len(parts) >= 3:
        return "::".join([parts[0], parts[1], virtual_type.value, name])
    return f"{virtual_type.value}::{name}"
