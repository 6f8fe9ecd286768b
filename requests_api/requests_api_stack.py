import logging
from typing import Dict, Optional

from aws_cdk import (
    Stack,
    aws_apigateway as apigw,
    aws_dynamodb as dynamodb,
    aws_lambda as _lambda,
    RemovalPolicy,
    CfnOutput,
)
from constructs import Construct

from requests_api import cors
from requests_api.composer import compose_requests_graph
from requests_api.config import ServiceSettings
from requests_api.errors import CompositionError
from requests_api.graph import (
    CorsRoute,
    FunctionDescriptor,
    GrantDescriptor,
    PathResource,
    ResourceGraph,
    RouteBinding,
    TableDescriptor,
)

logger = logging.getLogger(__name__)

RUNTIMES = {
    "python3.10": _lambda.Runtime.PYTHON_3_10,
    "python3.11": _lambda.Runtime.PYTHON_3_11,
    "python3.12": _lambda.Runtime.PYTHON_3_12,
    "python3.13": _lambda.Runtime.PYTHON_3_13,
}

REMOVAL_POLICIES = {
    "destroy": RemovalPolicy.DESTROY,
    "retain": RemovalPolicy.RETAIN,
}


class RequestsApiStack(Stack):

    def __init__(self, scope: Construct, id: str, graph: Optional[ResourceGraph] = None,
                 settings: Optional[ServiceSettings] = None, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        if graph is None:
            graph = compose_requests_graph(id, settings or ServiceSettings.from_context(self.node))
        self.graph = graph

        self.tables: Dict[str, dynamodb.Table] = {}
        self.functions: Dict[str, _lambda.Function] = {}
        self._resources: Dict[str, apigw.Resource] = {}

        # REST API
        self.api = apigw.RestApi(self, f"{graph.identity}Api",
            rest_api_name=graph.api_name,
        )

        # Builder order is already a dependency order
        for node in graph:
            if isinstance(node, TableDescriptor):
                self._add_table(node)
            elif isinstance(node, FunctionDescriptor):
                self._add_function(node)
            elif isinstance(node, GrantDescriptor):
                self.tables[node.target.id].grant_read_write_data(self.functions[node.grantee.id])
            elif isinstance(node, PathResource):
                parent = self._resources[node.parent.id] if node.parent else self.api.root
                self._resources[node.id] = parent.add_resource(node.path_part)
            elif isinstance(node, RouteBinding):
                self._resources[node.resource.id].add_method(
                    node.method, apigw.LambdaIntegration(self.functions[node.function.id]))
            elif isinstance(node, CorsRoute):
                self._add_cors_options(node)
            else:
                raise CompositionError(f"cannot realize {type(node).__name__}")

        CfnOutput(self, "ApiUrl", value=self.api.url)
        for table_id, table in self.tables.items():
            CfnOutput(self, f"{table_id}TableName", value=table.table_name)

        logger.info("Realized %d graph entries into %s", len(graph), id)

    @property
    def table(self) -> dynamodb.Table:
        return next(iter(self.tables.values()))

    def _add_table(self, node: TableDescriptor) -> None:
        self.tables[node.id] = dynamodb.Table(self, node.id,
            partition_key=dynamodb.Attribute(
                name=node.partition_key.name,
                type=getattr(dynamodb.AttributeType, node.partition_key.type),
            ),
            table_name=node.name,
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=REMOVAL_POLICIES[node.removal_policy],
        )

    def _add_function(self, node: FunctionDescriptor) -> None:
        runtime = RUNTIMES.get(node.runtime)
        if runtime is None:
            raise CompositionError(f"function {node.id!r}: unsupported runtime {node.runtime!r}")

        table = self.tables[node.environment.table.id]
        environment = node.environment.as_dict()
        environment["TABLE_NAME"] = table.table_name

        self.functions[node.id] = _lambda.Function(self, node.id,
            runtime=runtime,
            handler=node.handler,
            code=_lambda.Code.from_asset(node.code_dir),
            environment=environment,
        )

    def _add_cors_options(self, node: CorsRoute) -> None:
        self._resources[node.resource.id].add_method(
            "OPTIONS",
            apigw.MockIntegration(
                integration_responses=[
                    apigw.IntegrationResponse(
                        status_code=node.status_code,
                        response_parameters=cors.integration_response_parameters(node),
                    )
                ],
                passthrough_behavior=apigw.PassthroughBehavior.NEVER,
                request_templates=cors.PREFLIGHT_REQUEST_TEMPLATES,
            ),
            method_responses=[
                apigw.MethodResponse(
                    status_code=node.status_code,
                    response_parameters=cors.method_response_parameters(node),
                )
            ],
        )
