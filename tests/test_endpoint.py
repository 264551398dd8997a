from apidoc_extractor.extractor.endpoint import read_response, synthesize_controller, synthesize_endpoint
from apidoc_extractor.source.tree import Decorator, parse_source


def _controller(text: str):
    return parse_source(text).classes[0]


class TestSynthesizeEndpoint:
    def test_get_by_id(self):
        cls = _controller("""
        @Controller('categories')
        export class CategoriesController {
          @Get(':id')
          @ApiOperation({ summary: 'Get a category by id' })
          findOne(@Param('id') id: string) {
            return id;
          }
        }
        """)
        endpoints = synthesize_controller(cls)
        assert len(endpoints) == 1
        assert endpoints[0].to_json_dict() == {
            "method": "GET",
            "route": "categories/:id",
            "summary": "Get a category by id",
        }
        assert endpoints[0].controller == "CategoriesController"

    def test_methods_without_verb_are_skipped(self):
        cls = _controller("""
        @Controller('posts')
        class PostsController {
          @ApiOperation({ summary: 'Not routed' })
          helper() {}

          @Get()
          findAll() {}
        }
        """)
        assert [ep.route for ep in synthesize_controller(cls)] == ["posts"]

    def test_empty_route_is_discarded(self):
        cls = _controller("""
        @Controller()
        class AppController {
          @Get()
          root() {}

          @Get('/')
          slash() {}
        }
        """)
        assert synthesize_controller(cls) == []

    def test_missing_controller_decorator(self):
        cls = _controller("class Loose { @Post('items') create() {} }")
        endpoints = synthesize_controller(cls)
        assert endpoints[0].method == "POST"
        assert endpoints[0].route == "items"
        assert endpoints[0].summary == ""

    def test_operation_description(self):
        cls = _controller("""
        @Controller('users')
        class UsersController {
          @Delete(':id')
          @ApiOperation({ summary: 'Delete', description: 'Removes the user for good.' })
          remove() {}
        }
        """)
        data = synthesize_controller(cls)[0].to_json_dict()
        assert data["description"] == "Removes the user for good."

    def test_request_body_fallback(self):
        cls = _controller("""
        @Controller('posts')
        class PostsController {
          @Put(':id')
          update(@Param('id') id: number, @Body() updatePostDto: UpdatePostDto) {}
        }
        """)
        data = synthesize_controller(cls)[0].to_json_dict()
        assert data["requestBody"] == {"type": "UpdatePostDto"}

    def test_declaration_order_is_kept(self):
        cls = _controller("""
        @Controller('posts')
        class PostsController {
          @Get(':id') findOne() {}
          @Get('search') search() {}
          @Post() create() {}
        }
        """)
        assert [(ep.method, ep.route) for ep in synthesize_controller(cls)] == [
            ("GET", "posts/:id"),
            ("GET", "posts/search"),
            ("POST", "posts"),
        ]


class TestResponses:
    def test_status_classification(self):
        cls = _controller("""
        @Controller('categories')
        class CategoriesController {
          @Post()
          @ApiCreatedResponse({ description: 'Created.' })
          @ApiBadRequestResponse({ description: 'Invalid.' })
          @ApiNotFoundResponse({ description: 'Parent not found.' })
          create() {}
        }
        """)
        data = synthesize_controller(cls)[0].to_json_dict()
        assert data["response"] == {"status": 201, "description": "Created."}
        assert [r["status"] for r in data["errorResponses"]] == [400, 404]

    def test_explicit_status(self):
        cls = _controller("""
        @Controller('posts')
        class PostsController {
          @Get(':id')
          @ApiResponse({ status: 200, description: 'Return the blog post.' })
          @ApiResponse({ status: 404, description: 'Post not found.' })
          findOne() {}
        }
        """)
        ep = synthesize_controller(cls)[0]
        assert ep.response.status == 200
        assert ep.error_responses[0].description == "Post not found."

    def test_last_success_wins(self):
        cls = _controller("""
        @Controller('posts')
        class PostsController {
          @Get()
          @ApiOkResponse({ description: 'first' })
          @ApiResponse({ status: 206, description: 'second' })
          findAll() {}
        }
        """)
        ep = synthesize_controller(cls)[0]
        assert ep.response.status == 206
        assert ep.response.description == "second"
        assert ep.error_responses is None

    def test_no_responses(self):
        cls = _controller("@Controller('a') class A { @Get('b') b() {} }")
        data = synthesize_controller(cls)[0].to_json_dict()
        assert "response" not in data
        assert "errorResponses" not in data

    def test_status_override_and_http_status(self):
        assert read_response(Decorator("ApiOkResponse", ["{ status: 203 }"])).status == 203
        assert read_response(Decorator("ApiResponse", ["{ status: HttpStatus.CONFLICT }"])).status == 409
        assert read_response(Decorator("ApiResponse", ["{ status: '202' }"])).status == 202
        assert read_response(Decorator("ApiResponse", ["{ status: HttpStatus.NOPE }"])).status == 200
        assert read_response(Decorator("ApiResponse")).status == 200
        assert read_response(Decorator("ApiNoContentResponse")).status == 204

    def test_schema_block(self):
        resp = read_response(Decorator("ApiOkResponse", ["""{
            description: 'Returns the list of categories.',
            schema: { type: 'array', items: { type: 'object', properties: { id: { type: 'number', example: 1 } } } }
        }"""]))
        assert resp.schema_.type == "array"
        assert resp.schema_.items.properties["id"].example == 1

    def test_type_reference(self):
        resp = read_response(Decorator("ApiOkResponse", ["{ description: 'ok', type: CreateCategoryDto }"]))
        assert resp.model_dump(by_alias=True, exclude_unset=True) == {
            "status": 200,
            "description": "ok",
            "schema": {"type": "CreateCategoryDto"},
        }

    def test_array_type_reference(self):
        resp = read_response(Decorator("ApiOkResponse", ["{ type: [CreateCategoryDto] }"]))
        assert resp.schema_.type == "array"
        assert resp.schema_.items.type == "CreateCategoryDto"
        assert resp.description == ""

    def test_schema_takes_precedence_over_type(self):
        resp = read_response(Decorator("ApiOkResponse", ["{ type: Foo, schema: { type: 'number' } }"]))
        assert resp.schema_.type == "number"


class TestSynthesizeEndpointDirect:
    def test_first_verb_decorator_is_used(self):
        method = parse_source("class A { @Get('a') @Post('b') m() {} }").classes[0].methods[0]
        ep = synthesize_endpoint(method, "base")
        assert (ep.method, ep.route) == ("GET", "base/a")
