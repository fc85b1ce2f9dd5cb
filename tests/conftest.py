"""Shared fixtures: an in-memory Shopify store standing in for the transport."""

import copy
import re
from collections import defaultdict
from urllib.parse import parse_qsl

import pytest

from shop_migrate.extractors.rest_extractor import SINGULAR_KEYS
from shop_migrate.models.migration import Connection
from shop_migrate.orchestrator import MigrationOrchestrator
from shop_migrate.services.shopify_client import ShopifyAPIError

API_PREFIX = "/admin/api/2024-01/"

COLLECTION_RESOURCES = ("custom_collections", "smart_collections")


class FakeShopify:
    """
    In-memory store exposing the transport interface used by the engine.

    Every write is appended to ``writes`` as (method, endpoint, body) so tests
    can assert exactly which writes were issued.
    """

    def __init__(self, name="store"):
        self.name = name
        self.resources = defaultdict(list)
        self.articles = defaultdict(list)
        self.metafields = defaultdict(list)
        self.definitions = []
        self.metaobjects = defaultdict(list)
        self.writes = []
        self.reads = []
        self.user_errors = {}
        self._failures = []
        self._next_id = 1000

    # -- test helpers ------------------------------------------------------

    def new_id(self):
        self._next_id += 1
        return self._next_id

    def add(self, resource, **item):
        item.setdefault("id", self.new_id())
        self.resources[resource].append(item)
        return item

    def add_definition(self, type_, name=None, fields=None, id_=None):
        node = {
            "id": id_ or f"gid://shopify/MetaobjectDefinition/{self.new_id()}",
            "name": name or type_.title(),
            "type": type_,
            "fieldDefinitions": fields or [],
        }
        self.definitions.append(node)
        return node

    def add_entry(self, type_, handle, fields=None, id_=None):
        node = {
            "id": id_ or f"gid://shopify/Metaobject/{self.new_id()}",
            "handle": handle,
            "type": type_,
            "fields": fields or [],
        }
        self.metaobjects[type_].append(node)
        return node

    def fail(self, method, pattern, exc=None):
        """Make requests whose endpoint (or GraphQL text) contains ``pattern`` raise."""
        self._failures.append((method, pattern, exc or ShopifyAPIError(
            f"{method} {pattern} failed (500): boom", status_code=500, body="boom"
        )))

    def writes_of(self, method):
        return [w for w in self.writes if w[0] == method]

    # -- transport interface ----------------------------------------------

    def rest_path(self, resource):
        return API_PREFIX + resource.lstrip("/")

    def _check(self, method, endpoint):
        for m, pattern, exc in self._failures:
            if m == method and pattern in endpoint:
                raise exc

    def _parse(self, endpoint):
        path, _, query = endpoint[len(API_PREFIX):].partition("?")
        if path.endswith(".json"):
            path = path[:-5]
        return path.split("/"), dict(parse_qsl(query))

    def _find(self, resource, item_id):
        resources = COLLECTION_RESOURCES if resource == "collections" else (resource,)
        for res in resources:
            for item in self.resources[res]:
                if str(item["id"]) == str(item_id):
                    return item
        return None

    def get(self, endpoint):
        self.reads.append(endpoint)
        self._check("GET", endpoint)
        parts, params = self._parse(endpoint)

        if len(parts) == 1:
            if parts[0] == "collections":
                raise ShopifyAPIError(f"GET {endpoint} failed (404): Not Found", status_code=404)
            items = self.resources[parts[0]]
            if "handle" in params:
                items = [i for i in items if i.get("handle") == params["handle"]]
            return {parts[0]: copy.deepcopy(items)}

        if len(parts) == 2:
            item = self._find(parts[0], parts[1])
            if item is None:
                raise ShopifyAPIError(f"GET {endpoint} failed (404): Not Found", status_code=404)
            return {SINGULAR_KEYS[parts[0]]: copy.deepcopy(item)}

        if parts[0] == "blogs" and parts[2] == "articles":
            return {"articles": copy.deepcopy(self.articles[str(parts[1])])}

        if parts[2] == "metafields":
            return {"metafields": copy.deepcopy(self.metafields[(parts[0], str(parts[1]))])}

        raise AssertionError(f"Unexpected GET {endpoint}")

    def get_all(self, endpoint, root_key):
        return self.get(endpoint).get(root_key) or []

    def post(self, endpoint, body):
        self._check("POST", endpoint)
        self.writes.append(("POST", endpoint, copy.deepcopy(body)))
        parts, _ = self._parse(endpoint)

        if len(parts) == 1:
            key = SINGULAR_KEYS[parts[0]]
            item = dict(body[key], id=self.new_id())
            self.resources[parts[0]].append(item)
            return {key: copy.deepcopy(item)}

        if parts[0] == "blogs" and parts[2] == "articles":
            item = dict(body["article"], id=self.new_id(), blog_id=int(parts[1]))
            self.articles[str(parts[1])].append(item)
            return {"article": copy.deepcopy(item)}

        if parts[2] == "metafields":
            item = dict(body["metafield"], id=self.new_id())
            self.metafields[(parts[0], str(parts[1]))].append(item)
            return {"metafield": copy.deepcopy(item)}

        raise AssertionError(f"Unexpected POST {endpoint}")

    def put(self, endpoint, body):
        self._check("PUT", endpoint)
        self.writes.append(("PUT", endpoint, copy.deepcopy(body)))
        parts, _ = self._parse(endpoint)

        if len(parts) == 2:
            item = self._find(parts[0], parts[1])
            item.update(body[SINGULAR_KEYS[parts[0]]])
            return {SINGULAR_KEYS[parts[0]]: copy.deepcopy(item)}

        if parts[0] == "blogs" and parts[2] == "articles":
            for item in self.articles[str(parts[1])]:
                if str(item["id"]) == str(parts[3]):
                    item.update(body["article"])
                    return {"article": copy.deepcopy(item)}

        if parts[2] == "metafields":
            for item in self.metafields[(parts[0], str(parts[1]))]:
                if str(item["id"]) == str(parts[3]):
                    item.update(body["metafield"])
                    return {"metafield": copy.deepcopy(item)}

        raise AssertionError(f"Unexpected PUT {endpoint}")

    def graphql(self, query, variables=None):
        variables = variables or {}
        self._check("GRAPHQL", query)

        mutation = re.search(r"mutation \w+\([^)]*\)\s*\{\s*(\w+)", query)
        if mutation:
            name = mutation.group(1)
            self.writes.append(("GRAPHQL", name, copy.deepcopy(variables)))
            return self._mutate(name, variables)

        if "metaobjectDefinitions(" in query:
            return self._page("metaobjectDefinitions", self.definitions, variables)
        if "metaobjects(" in query:
            return self._page("metaobjects", self.metaobjects[variables["type"]], variables)

        raise AssertionError(f"Unexpected GraphQL query: {query}")

    def _page(self, connection, nodes, variables):
        start = int(variables["after"]) + 1 if variables.get("after") is not None else 0
        end = start + variables.get("first", 50)
        edges = [
            {"node": copy.deepcopy(node), "cursor": str(index)}
            for index, node in enumerate(nodes[start:end], start)
        ]
        return {"data": {connection: {"edges": edges, "pageInfo": {"hasNextPage": end < len(nodes)}}}}

    def _mutate(self, name, variables):
        errors = self.user_errors.get(name, [])
        if errors:
            return {"data": {name: {"userErrors": errors}}}

        if name == "metaobjectDefinitionCreate":
            definition = variables["definition"]
            node = self.add_definition(definition["type"], definition["name"], definition["fieldDefinitions"])
            return {"data": {name: {"metaobjectDefinition": {"id": node["id"], "type": node["type"]}, "userErrors": []}}}

        if name == "metaobjectCreate":
            mo = variables["metaobject"]
            node = self.add_entry(mo["type"], mo["handle"], [dict(f, type=None) for f in mo["fields"]])
            return {"data": {name: {"metaobject": {"id": node["id"]}, "userErrors": []}}}

        if name == "metaobjectUpdate":
            for nodes in self.metaobjects.values():
                for node in nodes:
                    if node["id"] == variables["id"]:
                        node["fields"] = [dict(f, type=None) for f in variables["metaobject"]["fields"]]
                        return {"data": {name: {"metaobject": {"id": node["id"]}, "userErrors": []}}}

        raise AssertionError(f"Unexpected mutation {name}")


SOURCE = Connection(url="https://source-shop.myshopify.com", token="shpat_source")
TARGET = Connection(url="target-shop.myshopify.com/", token="shpat_target")


@pytest.fixture
def source():
    return FakeShopify("source")


@pytest.fixture
def target():
    return FakeShopify("target")


@pytest.fixture
def client_factory(source, target):
    stores = {SOURCE.url: source, TARGET.url: target}
    return lambda connection: stores[connection.url]


@pytest.fixture
def orchestrator(client_factory):
    return MigrationOrchestrator(client_factory=client_factory)
