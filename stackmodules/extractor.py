"""Component extraction from deployment snapshot resources.

Walks the flat resource list of a snapshot once and synthesizes framework
components by matching each record's type token against COMPONENT_RULES:

- aws:apigateway/stage:Stage      -> Endpoint (joined with its deployment and REST API)
- aws:cloudwatch/eventRule:EventRule -> Timer
- aws:dynamodb/table:Table        -> Table
- aws:sns/topic:Topic             -> Topic
- aws:lambda/function:Function    -> Function

Records of any other type are ignored. Unresolved cross references never
raise; the affected role is left empty.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

import stackmodules.config.aws_framework as framework_config
from stackmodules.component import Component, Components, VirtualType, make_component_urn
from stackmodules.resources import ResourceRecord, TypeID, build_index, lookup

logger = logging.getLogger(__name__)

ResourceIndex = Dict[TypeID, ResourceRecord]


def _empty_roles(virtual_type: VirtualType) -> Dict[str, Optional[ResourceRecord]]:
    return {role: None for role in framework_config.COMPONENT_ROLES[virtual_type.value]}


def _new_component(
    virtual_type: VirtualType,
    source: ResourceRecord,
    name: str,
    properties: Dict[str, Any],
    populated: Dict[str, Optional[ResourceRecord]],
) -> Component:
    resources = _empty_roles(virtual_type)
    resources.update(populated)
    return Component(
        type=virtual_type,
        urn=make_component_urn(source.urn, virtual_type, name),
        properties=properties,
        resources=resources,
    )


def endpoint_from_stage(stage: ResourceRecord, index: ResourceIndex) -> Optional[Component]:
    """Join a stage with its deployment and REST API into an Endpoint.

    The endpoint is named after the REST API so that several stages of one
    API collapse into one endpoint.
    """
    deployment = lookup(
        index, framework_config.DEPLOYMENT_TYPE, stage.input_str("deployment")
    )
    rest_api = lookup(index, framework_config.REST_API_TYPE, stage.input_str("restApi"))

    properties = {}
    if deployment is not None:
        properties["url"] = (
            deployment.output_str("invokeUrl") + stage.input_str("stageName") + "/"
        )
    else:
        logger.debug(f"Stage {stage.urn} references unknown deployment, no url derived")
    if rest_api is None:
        logger.debug(f"Stage {stage.urn} references unknown REST API")

    source = rest_api if rest_api is not None else stage
    return _new_component(
        VirtualType.ENDPOINT,
        source,
        source.name,
        properties,
        {"restapi": rest_api, "deployment": deployment, "stage": stage},
    )


def timer_from_event_rule(rule: ResourceRecord, index: ResourceIndex) -> Optional[Component]:
    return _new_component(
        VirtualType.TIMER,
        rule,
        rule.name,
        {"schedule": rule.input_str("scheduleExpression")},
        {"rule": rule},
    )


def table_from_table(table: ResourceRecord, index: ResourceIndex) -> Optional[Component]:
    primary_key = table.output_str("hashKey")
    properties = {"primaryKey": primary_key}
    attributes = table.outputs.get("attributes") or []
    for attribute in attributes:
        if isinstance(attribute, dict) and attribute.get("name") == primary_key:
            properties["primaryKeyType"] = attribute.get("type", "")
            break
    return _new_component(VirtualType.TABLE, table, table.name, properties, {"table": table})


def topic_from_topic(topic: ResourceRecord, index: ResourceIndex) -> Optional[Component]:
    if topic.name.endswith(framework_config.INTERNAL_TOPIC_SUFFIX):
        return None
    return _new_component(VirtualType.TOPIC, topic, topic.name, {}, {"topic": topic})


def function_from_function(
    function: ResourceRecord, index: ResourceIndex
) -> Optional[Component]:
    if function.name.endswith(framework_config.INTERNAL_FUNCTION_SUFFIX):
        return None
    return _new_component(
        VirtualType.FUNCTION, function, function.name, {}, {"function": function}
    )


# Raw type token -> synthesis rule
COMPONENT_RULES: Dict[str, Callable[[ResourceRecord, ResourceIndex], Optional[Component]]] = {
    framework_config.STAGE_TYPE: endpoint_from_stage,
    framework_config.EVENT_RULE_TYPE: timer_from_event_rule,
    framework_config.TABLE_TYPE: table_from_table,
    framework_config.TOPIC_TYPE: topic_from_topic,
    framework_config.FUNCTION_TYPE: function_from_function,
}


def extract_components(resources: Sequence[ResourceRecord]) -> Components:
    """Translate snapshot resources into framework components.

    Args:
        resources: Flat resource list from a deployment snapshot

    Returns:
        Dict of component URN -> Component
    """
    index = build_index(resources)
    components: Components = {}
    for record in resources:
        rule = COMPONENT_RULES.get(record.type)
        if rule is None:
            continue
        component = rule(record, index)
        if component is None:
            logger.debug(f"Skipping framework-internal resource {record.urn or record.id}")
            continue
        if component.urn in components:
            logger.warning(
                f"Duplicate component {component.urn}, replacing previous definition"
            )
        components[component.urn] = component
    return components


def functions_of(components: Components) -> List[Component]:
    """Function components in URN order."""
    return [
        components[urn]
        for urn in sorted(components)
        if components[urn].type is VirtualType.FUNCTION
    ]


def format_components(components: Components) -> str:
    """Render a readable summary of components grouped by type."""
    lines = []
    for virtual_type in VirtualType:
        group = sorted(
            (c for c in components.values() if c.type is virtual_type),
            key=lambda c: c.urn,
        )
        lines.append(f"{virtual_type.kind + 's':<10}({len(group)})")
        for component in group:
            if virtual_type is VirtualType.ENDPOINT:
                lines.append(f"\t{component.name}: {component.properties.get('url', '')}")
            elif virtual_type is VirtualType.TIMER:
                lines.append(f"\t{component.name}: {component.properties.get('schedule', '')}")
            else:
                lines.append(f"\t{component.name}")
    return "\n".join(lines) + "\n"
