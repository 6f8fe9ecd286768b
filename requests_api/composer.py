import logging
from typing import Optional

from requests_api.config import ServiceSettings
from requests_api.cors import add_cors_options
from requests_api.graph import Attribute, FunctionEnvironment, GraphBuilder, ResourceGraph

logger = logging.getLogger(__name__)

# (construct id, handler module) for each function
FUNCTIONS = (
    ("getAllRequestsFunction", "get_all"),
    ("createRequestFunction", "create"),
    ("deleteRequestFunction", "delete_one"),
)

LOCK_FILE = "requirements.txt"


def compose_requests_graph(identity: str, settings: Optional[ServiceSettings] = None) -> ResourceGraph:
    """Describe the table, functions, grants and routes of the requests API."""
    settings = settings or ServiceSettings()
    builder = GraphBuilder(identity, settings.api_name)

    # Data is dropped on teardown
    table = builder.add_table(
        "requests",
        name=settings.table_name,
        partition_key=Attribute(settings.partition_key, "STRING"),
        removal_policy="destroy",
    )

    environment = FunctionEnvironment(table, settings.item_parameter)
    lock_file = settings.handler_path(LOCK_FILE)

    get_all, create_one, delete_one = [
        builder.add_function(
            function_id,
            entry=settings.handler_path(f"{module}.py"),
            handler=f"{module}.main",
            environment=environment,
            runtime=settings.runtime,
            deps_lock_file=lock_file,
        )
        for function_id, module in FUNCTIONS
    ]
    logger.debug("Declared functions for %s: %s", identity, [f.id for f in (get_all, create_one, delete_one)])

    for function in (get_all, create_one, delete_one):
        builder.grant_read_write(function, table)

    items = builder.add_resource("items", settings.collection_path)
    builder.add_route(items, "GET", get_all)
    builder.add_route(items, "POST", create_one)
    add_cors_options(builder, items)

    single_item = builder.add_resource("singleItem", f"{{{settings.item_parameter}}}", parent=items)
    builder.add_route(single_item, "DELETE", delete_one)
    add_cors_options(builder, single_item)

    graph = builder.build()
    logger.info("Composed %s: %d graph entries", identity, len(graph))
    return graph
