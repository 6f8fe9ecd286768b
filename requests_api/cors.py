"""Canned CORS preflight responses for API resources.

Preflight requests are answered by the API itself through a mock
integration, so no function is invoked for ``OPTIONS``.
"""
from typing import Dict

from requests_api.graph import CorsRoute, GraphBuilder, PathResource

CORS_HEADERS = (
    ("Access-Control-Allow-Headers",
     "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token,X-Amz-User-Agent"),
    ("Access-Control-Allow-Origin", "*"),
    # String, not boolean: API Gateway maps static header values verbatim.
    ("Access-Control-Allow-Credentials", "false"),
    # Static for every resource, whatever methods it actually binds.
    ("Access-Control-Allow-Methods", "OPTIONS,GET,PUT,POST,DELETE"),
)

PREFLIGHT_STATUS = "200"
PREFLIGHT_REQUEST_TEMPLATES = {"application/json": '{"statusCode": 200}'}

_HEADER_PREFIX = "method.response.header."


def add_cors_options(builder: GraphBuilder, resource: PathResource) -> CorsRoute:
    """Bind the preflight route on ``resource``.

    Raises ``NameCollisionError`` if the resource already has one.
    """
    return builder.add_cors_route(resource, PREFLIGHT_STATUS, CORS_HEADERS)


def integration_response_parameters(route: CorsRoute) -> Dict[str, str]:
    return {f"{_HEADER_PREFIX}{name}": f"'{value}'" for name, value in route.headers}


def method_response_parameters(route: CorsRoute) -> Dict[str, bool]:
    return {f"{_HEADER_PREFIX}{name}": True for name, _ in route.headers}
