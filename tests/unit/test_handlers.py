import importlib.util
import json
import os
from decimal import Decimal

import boto3
import pytest
from boto3.dynamodb.types import TypeSerializer

from requests_api.composer import compose_requests_graph
from requests_api.config import HANDLERS_DIR, ServiceSettings
from requests_api.graph import FunctionDescriptor


class FakeTable:

    def __init__(self, pages=None):
        self.pages = list(pages or [])
        self.puts = []
        self.deletes = []

    def scan(self, **kwargs):
        return self.pages.pop(0)

    def put_item(self, Item):
        # same type checks boto3 applies before sending
        serializer = TypeSerializer()
        for value in Item.values():
            serializer.serialize(value)
        self.puts.append(Item)

    def delete_item(self, Key):
        self.deletes.append(Key)


class FakeResource:

    def __init__(self, table):
        self.table = table

    def Table(self, name):
        return self.table


@pytest.fixture
def load_handler(monkeypatch):
    monkeypatch.setenv("TABLE_NAME", "requests")
    monkeypatch.setenv("PRIMARY_KEY", "requestId")

    def load(name, table):
        monkeypatch.setattr(boto3, "resource", lambda service: FakeResource(table))
        spec = importlib.util.spec_from_file_location(name, os.path.join(HANDLERS_DIR, f"{name}.py"))
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return load


def test_get_all_follows_pages(load_handler):
    table = FakeTable([
        {"Items": [{"requestId": "a"}], "LastEvaluatedKey": {"requestId": "a"}},
        {"Items": [{"requestId": "b"}]},
    ])
    handler = load_handler("get_all", table)

    response = handler.main({}, None)

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == [{"requestId": "a"}, {"requestId": "b"}]


def test_create_assigns_primary_key(load_handler):
    table = FakeTable()
    handler = load_handler("create", table)

    response = handler.main({"body": json.dumps({"title": "hello"})}, None)

    assert response["statusCode"] == 201
    (item,) = table.puts
    assert item["title"] == "hello"
    assert item["requestId"]
    assert json.loads(response["body"]) == item


@pytest.mark.parametrize("body", [None, "", "not json", "[1, 2]"])
def test_create_rejects_bad_body(load_handler, body):
    table = FakeTable()
    handler = load_handler("create", table)

    response = handler.main({"body": body}, None)

    assert response["statusCode"] == 400
    assert table.puts == []


def test_delete_one(load_handler):
    table = FakeTable()
    handler = load_handler("delete_one", table)

    response = handler.main({"pathParameters": {"id": "abc"}}, None)

    assert response["statusCode"] == 200
    assert table.deletes == [{"requestId": "abc"}]


def test_delete_one_requires_id(load_handler):
    table = FakeTable()
    handler = load_handler("delete_one", table)

    response = handler.main({"pathParameters": None}, None)

    assert response["statusCode"] == 400
    assert table.deletes == []


def test_create_stores_fractional_numbers_as_decimal(load_handler):
    table = FakeTable()
    handler = load_handler("create", table)

    response = handler.main({"body": '{"title": "x", "amount": 1.5, "count": 3}'}, None)

    assert response["statusCode"] == 201
    (item,) = table.puts
    assert item["amount"] == Decimal("1.5")
    body = json.loads(response["body"])
    assert body["amount"] == 1.5
    assert body["count"] == 3


def test_get_all_returns_numbers(load_handler):
    table = FakeTable([
        {"Items": [{"requestId": "a", "amount": Decimal("1.5"), "count": Decimal("3")}]},
    ])
    handler = load_handler("get_all", table)

    response = handler.main({}, None)

    assert json.loads(response["body"]) == [{"requestId": "a", "amount": 1.5, "count": 3}]


def test_delete_one_reads_configured_parameter(load_handler, monkeypatch):
    graph = compose_requests_graph("Tickets", ServiceSettings(item_parameter="ticketId"))
    delete_fn = graph.get("deleteRequestFunction")
    assert isinstance(delete_fn, FunctionDescriptor)
    for name, value in delete_fn.environment.as_dict().items():
        monkeypatch.setenv(name, value)
    table = FakeTable()
    handler = load_handler("delete_one", table)

    response = handler.main({"pathParameters": {"ticketId": "abc"}}, None)

    assert response["statusCode"] == 200
    assert table.deletes == [{"requestId": "abc"}]
