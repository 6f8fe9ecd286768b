"""Typed resource graph for the requests API.

Nodes are frozen descriptors. A ``GraphBuilder`` only accepts references to
nodes it already holds, so insertion order is always a valid realization
order and the graph cannot contain cycles.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Type, TypeVar

from requests_api.errors import (
    CompositionError,
    InvalidNameError,
    MissingReferenceError,
    NameCollisionError,
)

logger = logging.getLogger(__name__)

ATTRIBUTE_TYPES = ("STRING", "NUMBER", "BINARY")
REMOVAL_POLICIES = ("destroy", "retain")
HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "ANY")

_ID_RE = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")
_PATH_PART_RE = re.compile(r"^(?:[A-Za-z0-9._-]+|\{[A-Za-z_][A-Za-z0-9_]*\+?\})$")


@dataclass(frozen=True)
class Attribute:
    name: str
    type: str = "STRING"


@dataclass(frozen=True)
class TableDescriptor:
    id: str
    name: str
    partition_key: Attribute
    removal_policy: str = "destroy"


@dataclass(frozen=True)
class FunctionEnvironment:
    """Environment contract shared by every function touching ``table``."""

    table: TableDescriptor
    item_parameter: str = "id"

    @property
    def primary_key(self) -> str:
        return self.table.partition_key.name

    @property
    def table_name(self) -> str:
        return self.table.name

    def as_dict(self) -> Dict[str, str]:
        return {
            "PRIMARY_KEY": self.primary_key,
            "TABLE_NAME": self.table_name,
            "ITEM_PARAMETER": self.item_parameter,
        }


@dataclass(frozen=True)
class FunctionDescriptor:
    id: str
    entry: str
    handler: str
    environment: FunctionEnvironment
    runtime: str
    deps_lock_file: str

    @property
    def code_dir(self) -> str:
        return os.path.dirname(self.entry)


@dataclass(frozen=True)
class GrantDescriptor:
    id: str
    grantee: FunctionDescriptor
    target: TableDescriptor
    access: str = "read_write"


@dataclass(frozen=True)
class PathResource:
    id: str
    path_part: str
    parent: Optional["PathResource"] = None

    @property
    def path(self) -> str:
        prefix = self.parent.path if self.parent is not None else ""
        return f"{prefix}/{self.path_part}"

    @property
    def is_parameterized(self) -> bool:
        return self.path_part.startswith("{")


@dataclass(frozen=True)
class RouteBinding:
    id: str
    resource: PathResource
    method: str
    function: FunctionDescriptor


@dataclass(frozen=True)
class CorsRoute:
    id: str
    resource: PathResource
    status_code: str
    headers: Tuple[Tuple[str, str], ...]

    method = "OPTIONS"


Node = TypeVar("Node")


@dataclass(frozen=True)
class ResourceGraph:
    identity: str
    api_name: str
    nodes: Tuple[object, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[object]:
        return iter(self.nodes)

    def get(self, node_id: str):
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def of_type(self, cls: Type[Node]) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes if isinstance(n, cls))

    def routes_for(self, resource: PathResource) -> Tuple[RouteBinding, ...]:
        return tuple(r for r in self.of_type(RouteBinding) if r.resource == resource)

    def cors_routes_for(self, resource: PathResource) -> Tuple[CorsRoute, ...]:
        return tuple(r for r in self.of_type(CorsRoute) if r.resource == resource)

    def children_of(self, resource: Optional[PathResource]) -> Tuple[PathResource, ...]:
        return tuple(r for r in self.of_type(PathResource) if r.parent == resource)


class GraphBuilder:
    """Collects descriptors and checks them as they are added."""

    def __init__(self, identity: str, api_name: str) -> None:
        _check_id(identity)
        self.identity = identity
        self.api_name = api_name
        self._nodes: Dict[str, object] = {}
        self._path_parts = set()
        self._methods = set()
        self._built = False

    def add_table(self, id: str, name: str, partition_key: Attribute,
                  removal_policy: str = "destroy") -> TableDescriptor:
        if partition_key.type not in ATTRIBUTE_TYPES:
            raise CompositionError(f"unknown attribute type {partition_key.type!r}")
        if removal_policy not in REMOVAL_POLICIES:
            raise CompositionError(f"unknown removal policy {removal_policy!r}")
        if not name:
            raise InvalidNameError(f"table {id!r} needs a name")
        return self._add(TableDescriptor(id, name, partition_key, removal_policy))

    def add_function(self, id: str, entry: str, handler: str,
                     environment: FunctionEnvironment, runtime: str,
                     deps_lock_file: str) -> FunctionDescriptor:
        """Add a function. ``deps_lock_file`` is only checked for existence;
        it ships with the code asset and is not read here.
        """
        self._require(environment.table)
        if not os.path.isfile(entry):
            raise MissingReferenceError(f"function {id!r}: entry {entry} not found")
        if not os.path.isfile(deps_lock_file):
            raise MissingReferenceError(
                f"function {id!r}: dependency lock file {deps_lock_file} not found")
        return self._add(FunctionDescriptor(id, entry, handler, environment, runtime, deps_lock_file))

    def grant_read_write(self, grantee: FunctionDescriptor, target: TableDescriptor) -> GrantDescriptor:
        self._require(grantee)
        self._require(target)
        return self._add(GrantDescriptor(f"{grantee.id}-{target.id}-grant", grantee, target))

    def add_resource(self, id: str, path_part: str,
                     parent: Optional[PathResource] = None) -> PathResource:
        if parent is not None:
            self._require(parent)
        if not _PATH_PART_RE.match(path_part):
            raise InvalidNameError(f"malformed path part {path_part!r}")
        key = (parent.id if parent is not None else None, path_part)
        if key in self._path_parts:
            raise NameCollisionError(f"path part {path_part!r} already exists under {parent}")
        resource = self._add(PathResource(id, path_part, parent))
        self._path_parts.add(key)
        return resource

    def add_route(self, resource: PathResource, method: str,
                  function: FunctionDescriptor) -> RouteBinding:
        self._require(function)
        self._check_method(resource, method)
        route = self._add(RouteBinding(f"{resource.id}-{method}", resource, method, function))
        self._methods.add((resource.id, method))
        return route

    def add_cors_route(self, resource: PathResource, status_code: str,
                       headers: Tuple[Tuple[str, str], ...]) -> CorsRoute:
        self._check_method(resource, CorsRoute.method)
        route = self._add(CorsRoute(f"{resource.id}-OPTIONS", resource, status_code, headers))
        self._methods.add((resource.id, CorsRoute.method))
        return route

    def build(self) -> ResourceGraph:
        self._built = True
        graph = ResourceGraph(self.identity, self.api_name, tuple(self._nodes.values()))
        logger.debug("Built graph %s with %d entries", self.identity, len(graph))
        return graph

    def _check_method(self, resource: PathResource, method: str) -> None:
        self._require(resource)
        if method not in HTTP_METHODS:
            raise CompositionError(f"unsupported HTTP method {method!r}")
        if (resource.id, method) in self._methods:
            raise NameCollisionError(f"{method} is already bound on {resource.path}")

    def _require(self, node) -> None:
        if self._nodes.get(node.id) != node:
            raise MissingReferenceError(f"{type(node).__name__} {node.id!r} is not part of this graph")

    def _add(self, node):
        if self._built:
            raise CompositionError("graph already built")
        _check_id(node.id)
        if node.id in self._nodes:
            raise NameCollisionError(f"duplicate resource id {node.id!r}")
        self._nodes[node.id] = node
        return node


def _check_id(value: str) -> None:
    if not isinstance(value, str) or not _ID_RE.match(value):
        raise InvalidNameError(f"malformed resource id {value!r}")
