import logging
import os
from dataclasses import dataclass, fields

from constructs import Node

HANDLERS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lambda")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ServiceSettings:
    """Names and knobs for the requests API, overridable via ``cdk.json`` context."""

    table_name: str = "requests"
    partition_key: str = "requestId"
    api_name: str = "Request Service"
    collection_path: str = "requests"
    item_parameter: str = "id"
    runtime: str = "python3.12"
    handlers_dir: str = HANDLERS_DIR

    @classmethod
    def from_context(cls, node: Node) -> "ServiceSettings":
        overrides = {}
        for f in fields(cls):
            value = node.try_get_context(f.name)
            if value is not None:
                overrides[f.name] = value
        return cls(**overrides)

    def handler_path(self, filename: str) -> str:
        return os.path.join(self.handlers_dir, filename)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
    )
