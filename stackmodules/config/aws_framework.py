# AWS Framework Configuration for stackops
# Provider: Amazon Web Services (aws provider)
# Mapping: raw AWS resources > framework components > CloudWatch queries

# Raw resource type tokens recorded in deployment snapshots
STAGE_TYPE = "aws:apigateway/stage:Stage"
DEPLOYMENT_TYPE = "aws:apigateway/deployment:Deployment"
REST_API_TYPE = "aws:apigateway/restApi:RestApi"
EVENT_RULE_TYPE = "aws:cloudwatch/eventRule:EventRule"
TABLE_TYPE = "aws:dynamodb/table:Table"
TOPIC_TYPE = "aws:sns/topic:Topic"
FUNCTION_TYPE = "aws:lambda/function:Function"

# Virtual component type tokens
ENDPOINT_COMPONENT = "pulumi:framework:Endpoint"
TIMER_COMPONENT = "pulumi:framework:Timer"
TABLE_COMPONENT = "pulumi:framework:Table"
TOPIC_COMPONENT = "pulumi:framework:Topic"
FUNCTION_COMPONENT = "pulumi:framework:Function"

# Resources created by the framework itself never become components
INTERNAL_TOPIC_SUFFIX = "unhandled-error-topic"
INTERNAL_FUNCTION_SUFFIX = "pulumi-app-log-collector"

# Logical roles held by each component. Roles after the first are not tracked
# in the snapshot and stay empty.
COMPONENT_ROLES = {
    ENDPOINT_COMPONENT: ["restapi", "deployment", "stage"],
    TIMER_COMPONENT: ["rule", "target", "permission"],
    TABLE_COMPONENT: ["table"],
    TOPIC_COMPONENT: ["topic"],
    FUNCTION_COMPONENT: [
        "function",
        "role",
        "roleAttachment",
        "logGroup",
        "logSubscriptionFilter",
        "permission",
    ],
}

# CloudWatch metric namespace per component type
METRIC_NAMESPACES = {
    FUNCTION_COMPONENT: "AWS/Lambda",
    ENDPOINT_COMPONENT: "AWS/ApiGateway",
    TOPIC_COMPONENT: "AWS/SNS",
    TIMER_COMPONENT: "AWS/Events",
    TABLE_COMPONENT: "AWS/DynamoDB",
}

# Metrics exposed per component type. CloudWatch publishes more (e.g.
# DeadLetterErrors, IteratorAge, CacheHitCount, TriggeredRules,
# ReturnedItemCount) but those describe framework internals.
COMPONENT_METRICS = {
    FUNCTION_COMPONENT: ("Invocations", "Duration", "Errors", "Throttles"),
    ENDPOINT_COMPONENT: ("4XXError", "5XXError", "Count", "Latency"),
    TOPIC_COMPONENT: (
        "NumberOfMessagesPublished",
        "PublishSize",
        "NumberOfNotificationsDelivered",
        "NumberOfNotificationsFailed",
    ),
    TIMER_COMPONENT: ("Invocations", "FailedInvocations"),
    TABLE_COMPONENT: (
        "ConsumedReadCapacityUnits",
        "ConsumedWriteCapacityUnits",
        "ThrottledRequests",
    ),
}

# Aggregates requested from GetMetricStatistics
METRIC_STATISTICS = ["Sum", "SampleCount", "Average", "Maximum", "Minimum"]

# Default window when a metric request carries no time bounds
DEFAULT_METRIC_WINDOW_SECONDS = 3600
DEFAULT_METRIC_PERIOD_SECONDS = 60

# Lambda writes to /aws/lambda/<function name>
LOG_GROUP_PREFIX = "/aws/lambda/"

# Lambda runtime lines look like "<iso timestamp>Z\t<request id>\t<message>"
LOG_LINE_PATTERN = r".*Z\t[a-g0-9\-]*\t(.*)"
