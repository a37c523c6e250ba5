"""Raw deployed-resource records and the (type, id) lookup index.

A deployment snapshot lists every provisioned resource as a flat record. The
extractor joins those records to each other (a stage to its deployment and
REST API) through the index built here.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

TypeID = Tuple[str, str]


@dataclass(frozen=True)
class ResourceRecord:
    """One resource as captured in a deployment snapshot.

    Args:
        urn: Unique resource name, e.g. "urn:pulumi:dev::todo::aws:sns/topic:Topic::countDown"
        type: Hierarchical type token, e.g. "aws:lambda/function:Function"
        id: Provider-assigned identifier
        inputs: Properties as declared at deploy time
        outputs: Properties as resolved after provisioning

    The property maps are copied into read-only views; nested values are
    not frozen.
    """

    urn: str
    type: str
    id: str = ""
    inputs: Mapping[str, Any] = field(default_factory=dict)
    outputs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "inputs", MappingProxyType(dict(self.inputs)))
        object.__setattr__(self, "outputs", MappingProxyType(dict(self.outputs)))

    def __hash__(self):
        return hash((self.type, self.id, self.urn))

    @property
    def name(self) -> str:
        """Logical name: last URN segment, else urnName/name input, else id."""
        if self.urn and "::" in self.urn:
            return self.urn.split("::")[-1]
        for key in ("urnName", "name"):
            value = self.inputs.get(key)
            if isinstance(value, str) and value:
                return value
        return self.id

    def input_str(self, key: str) -> str:
        value = self.inputs.get(key)
        return value if isinstance(value, str) else ""

    def output_str(self, key: str) -> str:
        value = self.outputs.get(key)
        return value if isinstance(value, str) else ""


def build_index(resources: Iterable[ResourceRecord]) -> Dict[TypeID, ResourceRecord]:
    """Build a (type, id) -> record lookup in one pass.

    Duplicate (type, id) pairs keep the last record seen.
    """
    index = {}
    for record in resources:
        index[(record.type, record.id)] = record
    return index


def lookup(
    index: Dict[TypeID, ResourceRecord], resource_type: str, resource_id: str
) -> Optional[ResourceRecord]:
    return index.get((resource_type, resource_id))
