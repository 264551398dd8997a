"""End-to-end extraction over the fixture NestJS project."""

import json
from pathlib import Path

from apidoc_extractor.emitter.json_doc import render_json
from apidoc_extractor.emitter.markdown import render_markdown
from apidoc_extractor.extractor.aggregate import extract_endpoints
from apidoc_extractor.source.project import Project

FIXTURES = Path(__file__).parent / "fixtures"
BLOG = FIXTURES / "blog"


def _docs() -> list[dict]:
    return json.loads(render_json(extract_endpoints(Project.load(BLOG))))


def _find(docs: list[dict], method: str, route: str) -> dict:
    return [d for d in docs if d["method"] == method and d["route"] == route][0]


class TestBlogExtraction:
    def test_idempotent_output(self):
        first = render_json(extract_endpoints(Project.load(BLOG)))
        second = render_json(extract_endpoints(Project.load(BLOG)))
        assert first == second

    def test_route_order(self):
        routes = [(d["method"], d["route"]) for d in _docs()]
        assert routes[:3] == [
            ("POST", "categories"),
            ("GET", "categories"),
            ("GET", "categories/hierarchy"),
        ]
        assert routes[-2:] == [("GET", "users"), ("POST", "users")]

    def test_create_category(self):
        doc = _find(_docs(), "POST", "categories")
        assert doc["summary"] == "Create a new category"
        body = doc["requestBody"]
        assert body["type"] == "object"
        assert body["properties"]["order"] == {
            "type": "number",
            "description": "The display order of the category",
            "example": 1,
            "required": False,
        }
        assert doc["response"]["status"] == 201
        schema = doc["response"]["schema"]
        assert schema["properties"]["parentId"] == {"type": "number", "example": None, "nullable": True}
        assert schema["properties"]["tags"]["items"] == {"type": "string"}
        assert schema["properties"]["createdAt"]["format"] == "date-time"
        errors = doc["errorResponses"]
        assert [e["status"] for e in errors] == [400]
        assert errors[0]["schema"]["properties"]["error"]["example"] == "Bad Request"

    def test_hierarchy_nesting(self):
        doc = _find(_docs(), "GET", "categories/hierarchy")
        item = doc["response"]["schema"]["items"]
        children = item["properties"]["children"]
        assert children["type"] == "array"
        grandchildren = children["items"]["properties"]["children"]
        assert grandchildren["items"] == {"type": "Category"}

    def test_type_references(self):
        docs = _docs()
        find_one = _find(docs, "GET", "categories/:id")
        assert find_one["response"]["schema"] == {"type": "CreateCategoryDto"}
        assert find_one["errorResponses"] == [{"status": 404, "description": "Category not found."}]
        children = _find(docs, "GET", "categories/:id/children")
        assert children["response"]["schema"] == {"type": "array", "items": {"type": "CreateCategoryDto"}}

    def test_update_category(self):
        doc = _find(_docs(), "PUT", "categories/:id")
        assert doc["requestBody"] == {"type": "UpdateCategoryDto"}
        assert doc["response"]["status"] == 200
        assert [e["status"] for e in doc["errorResponses"]] == [404, 400]

    def test_posts(self):
        docs = _docs()
        create = _find(docs, "POST", "posts")
        assert list(create["requestBody"]["properties"]) == ["title", "content"]
        assert create["response"] == {"status": 201, "description": "The post has been successfully created."}
        assert create["errorResponses"] == [{"status": 400, "description": "Bad Request."}]
        search = _find(docs, "GET", "posts/search")
        assert "requestBody" not in search

    def test_users_namespace_import_and_http_status(self):
        docs = _docs()
        create = _find(docs, "POST", "users")
        assert create["requestBody"]["properties"]["email"]["example"] == "john@example.com"
        assert create["response"] == {"status": 201, "description": "Created.", "schema": {"type": "CreateUserDto"}}
        assert create["errorResponses"][0]["status"] == 409
        listing = _find(docs, "GET", "users")
        assert listing["description"] == "Returns every registered user."
        assert listing["response"]["schema"]["items"] == {"type": "CreateUserDto"}

    def test_root_route_is_dropped(self):
        assert all(d["route"] for d in _docs())
        assert not any(d["summary"] == "Service banner" for d in _docs())

    def test_markdown(self):
        md = render_markdown(extract_endpoints(Project.load(BLOG)))
        assert "## CategoriesController" in md
        assert "### DELETE `posts/:id`" in md
        assert "**Description:** Get categories by tag" in md
