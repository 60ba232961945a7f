# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""High-level server primitives built on the reference SDK.

Developers author plain functions with ``@tool``, ``@resource``,
``@resource_template``, ``@prompt`` and ``@completion`` and register them
inside a short ``collecting`` scope.  The server then exposes those callables
through the matching MCP RPCs (``tools/list``, ``tools/call``,
``resources/read``, ``prompts/get`` ...).

One :class:`MCPServer` is bound to exactly one client session; the HTTP
transport builds a fresh instance per session through the server factory.
"""

from __future__ import annotations

import base64
from collections.abc import Callable, Iterable, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
import inspect
import json
import types as pytypes
from typing import TYPE_CHECKING, Any

import mcp.types as types
from mcp.server.lowlevel.server import NotificationOptions, Server, request_ctx
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError
from pydantic import TypeAdapter
from typing_extensions import NotRequired, TypedDict

from ..completion import (
    CompletionResult,
    CompletionSpec,
    extract_completion_spec,
    reset_active_server as reset_completion_server,
    set_active_server as set_completion_server,
)
from ..exceptions import ToolError
from ..prompt import (
    PromptSpec,
    extract_prompt_spec,
    reset_active_server as reset_prompt_server,
    set_active_server as set_prompt_server,
)
from ..resource import (
    ResourceSpec,
    extract_resource_spec,
    reset_active_server as reset_resource_server,
    set_active_server as set_resource_server,
)
from ..resource_template import (
    ResourceTemplateSpec,
    extract_resource_template_spec,
    reset_active_server as reset_resource_template_server,
    set_active_server as set_resource_template_server,
)
from ..tool import (
    ToolSpec,
    extract_tool_spec,
    reset_active_server as reset_tool_server,
    set_active_server as set_tool_server,
)
from ..utils import get_logger
from .config import ServerConfig
from .services import ElicitationService, SamplingService

if TYPE_CHECKING:  # pragma: no cover
    from mcp.server.session import ServerSession
    from mcp.shared.context import RequestContext


@dataclass(slots=True)
class NotificationFlags:
    """List-change notifications advertised during initialization."""

    prompts_changed: bool = False
    resources_changed: bool = False
    tools_changed: bool = False


class MCPServer(Server[Any, Any]):
    """Server surface for one MCP session.

    The class extends the reference ``mcp`` server to provide:

    * lifecycle helpers that always advertise capabilities consistent with the
      registered handlers
    * the ambient registration UX (``with server.collecting(): ...``)
    * tool-boundary error handling: any failure inside a tool body becomes a
      ``CallToolResult`` with ``isError=True``
    * proxies for server-initiated requests (sampling, elicitation) and
      notifications (progress, list changes) scoped to the current request
    """

    def __init__(
        self,
        name: str,
        *,
        version: str | None = None,
        instructions: str | None = None,
        notification_flags: NotificationFlags | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        super().__init__(name, version=version, instructions=instructions)
        self.config = config or ServerConfig()
        self._notification_flags = notification_flags or NotificationFlags()
        self._logger = get_logger(f"server.{name}")
        self._pagination_limit = self.config.pagination_limit

        self._sampling = SamplingService(timeout=self.config.sampling.timeout)
        self._elicitation = ElicitationService(timeout=self.config.elicitation.timeout)

        self._tool_specs: dict[str, ToolSpec] = {}
        self._tool_defs: dict[str, types.Tool] = {}
        self._resource_specs: dict[str, ResourceSpec] = {}
        self._resource_defs: dict[str, types.Resource] = {}
        self._resource_template_specs: dict[str, ResourceTemplateSpec] = {}
        self._resource_template_defs: list[types.ResourceTemplate] = []
        self._prompt_specs: dict[str, PromptSpec] = {}
        self._prompt_defs: dict[str, types.Prompt] = {}
        self._completion_specs: dict[tuple[str, str], CompletionSpec] = {}

        # Installed without the SDK decorators: list results are paginated here.
        async def _list_tools(request: types.ListToolsRequest) -> types.ServerResult:
            page, next_cursor = self._paginate(list(self._tool_defs.values()), _cursor_of(request))
            return types.ServerResult(types.ListToolsResult(tools=page, nextCursor=next_cursor))

        async def _call_tool(request: types.CallToolRequest) -> types.ServerResult:
            params = request.params
            return types.ServerResult(await self._execute_tool(params.name, params.arguments or {}))

        async def _list_resources(request: types.ListResourcesRequest) -> types.ServerResult:
            page, next_cursor = self._paginate(list(self._resource_defs.values()), _cursor_of(request))
            return types.ServerResult(types.ListResourcesResult(resources=page, nextCursor=next_cursor))

        async def _read_resource(request: types.ReadResourceRequest) -> types.ServerResult:
            return types.ServerResult(await self._execute_resource(str(request.params.uri)))

        async def _list_resource_templates(request: types.ListResourceTemplatesRequest) -> types.ServerResult:
            page, next_cursor = self._paginate(self._resource_template_defs, _cursor_of(request))
            return types.ServerResult(
                types.ListResourceTemplatesResult(resourceTemplates=page, nextCursor=next_cursor)
            )

        async def _list_prompts(request: types.ListPromptsRequest) -> types.ServerResult:
            page, next_cursor = self._paginate(list(self._prompt_defs.values()), _cursor_of(request))
            return types.ServerResult(types.ListPromptsResult(prompts=page, nextCursor=next_cursor))

        self.request_handlers[types.ListToolsRequest] = _list_tools
        self.request_handlers[types.CallToolRequest] = _call_tool
        self.request_handlers[types.ListResourcesRequest] = _list_resources
        self.request_handlers[types.ReadResourceRequest] = _read_resource
        self.request_handlers[types.ListResourceTemplatesRequest] = _list_resource_templates
        self.request_handlers[types.ListPromptsRequest] = _list_prompts

        @self.get_prompt()
        async def _get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
            return await self._execute_prompt(name, arguments)

        @self.completion()
        async def _completion_handler(
            ref: types.PromptReference | types.ResourceTemplateReference,
            argument: types.CompletionArgument,
            context: types.CompletionContext | None,
        ) -> types.Completion | None:
            return await self._execute_completion(ref, argument, context)

    # ------------------------------------------------------------------
    # Capability negotiation helpers
    # ------------------------------------------------------------------

    def create_initialization_options(
        self,
        notification_options: NotificationOptions | None = None,
        experimental_capabilities: dict[str, dict[str, Any]] | None = None,
    ) -> InitializationOptions:
        """Build the options payload for ``initialize``.

        Unless overridden, list-change capabilities follow the server's
        :class:`NotificationFlags`.
        """

        flags = self._notification_flags
        return super().create_initialization_options(
            notification_options=notification_options
            or NotificationOptions(
                prompts_changed=flags.prompts_changed,
                resources_changed=flags.resources_changed,
                tools_changed=flags.tools_changed,
            ),
            experimental_capabilities=experimental_capabilities or {},
        )

    # ------------------------------------------------------------------
    # Registration API
    # ------------------------------------------------------------------

    @contextmanager
    def collecting(self):
        """Ambient scope for decorator registration.

        Sample usage::

            server = MCPServer("demo")
            with server.collecting():
                @tool(description="Adds numbers")
                def add(a: int, b: int) -> int:
                    return a + b

        Outside the scope the decorators simply store metadata on the function.
        """
        tool_token = set_tool_server(self)
        resource_token = set_resource_server(self)
        template_token = set_resource_template_server(self)
        prompt_token = set_prompt_server(self)
        completion_token = set_completion_server(self)

        try:
            yield self
        finally:
            reset_tool_server(tool_token)
            reset_resource_server(resource_token)
            reset_resource_template_server(template_token)
            reset_prompt_server(prompt_token)
            reset_completion_server(completion_token)

    def register_tool(self, target: ToolSpec | Callable[..., Any]) -> ToolSpec:
        """Register *target* as a tool.

        ``target`` may be a :class:`ToolSpec` or a plain callable carrying the
        decorator metadata.  Undecorated callables get a basic spec named
        after the function.  Registering a name twice replaces the earlier tool.
        """
        spec = target if isinstance(target, ToolSpec) else extract_tool_spec(target)
        if spec is None:
            fn = target
            spec = ToolSpec(name=getattr(fn, "__name__", "anonymous"), fn=fn)  # type: ignore[arg-type]
        self._tool_specs[spec.name] = spec
        self._tool_defs[spec.name] = types.Tool(
            name=spec.name,
            title=spec.title,
            description=spec.description or None,
            inputSchema=dict(spec.input_schema) if spec.input_schema else self._build_input_schema(spec.fn),
            annotations=spec.annotations,
        )
        return spec

    def register_resource(self, target: ResourceSpec | Callable[[], Any]) -> ResourceSpec:
        spec = target if isinstance(target, ResourceSpec) else extract_resource_spec(target)
        if spec is None:
            raise ValueError("Resource functions must be decorated with @resource")
        self._resource_specs[spec.uri] = spec
        self._resource_defs[spec.uri] = types.Resource(
            uri=spec.uri,  # type: ignore[arg-type]
            name=spec.name or spec.uri,
            description=spec.description,
            mimeType=spec.mime_type,
        )
        return spec

    def register_resource_template(
        self,
        target: ResourceTemplateSpec | Callable[..., Any],
    ) -> ResourceTemplateSpec:
        """Register a resource template (``resources/templates/list``)."""

        spec = target if isinstance(target, ResourceTemplateSpec) else extract_resource_template_spec(target)
        if spec is None:
            raise ValueError("Resource templates must be decorated with @resource_template")
        self._resource_template_specs[spec.uri_template] = spec
        self._resource_template_defs = [
            item.to_resource_template()
            for item in sorted(self._resource_template_specs.values(), key=lambda s: (s.name, s.uri_template))
        ]
        return spec

    def register_prompt(self, target: PromptSpec | Callable[..., Any]) -> PromptSpec:
        spec = target if isinstance(target, PromptSpec) else extract_prompt_spec(target)
        if spec is None:
            raise ValueError("Prompt functions must be decorated with @prompt")
        self._prompt_specs[spec.name] = spec
        self._prompt_defs[spec.name] = types.Prompt(
            name=spec.name,
            title=spec.title,
            description=spec.description,
            arguments=spec.arguments,
        )
        return spec

    def register_completion(self, target: CompletionSpec | Callable[..., Any]) -> CompletionSpec:
        """Register a completion provider (``completion/complete``)."""

        spec = target if isinstance(target, CompletionSpec) else extract_completion_spec(target)
        if spec is None:
            raise ValueError("Completion functions must be decorated with @completion")
        self._completion_specs[(spec.ref_type, spec.key)] = spec
        return spec

    # ------------------------------------------------------------------
    # Request-scoped helpers for handlers
    # ------------------------------------------------------------------

    async def report_progress(self, progress: float, total: float | None = None, message: str | None = None) -> bool:
        """Send ``notifications/progress`` for the request being handled.

        Uses the client's ``progressToken`` when it supplied one and falls back
        to the tool name otherwise.  Returns ``False`` outside a request.
        """

        context = self._get_request_context()
        if context is None:
            return False
        token: types.ProgressToken | None = None
        if context.meta is not None:
            token = context.meta.progressToken
        if token is None:
            token = self._current_tool_name(context) or "progress"
        await context.session.send_progress_notification(
            progress_token=token,
            progress=progress,
            total=total,
            message=message,
            related_request_id=str(context.request_id),
        )
        return True

    async def notify_tools_list_changed(self) -> None:
        """Emit ``notifications/tools/list_changed`` to this server's client."""

        context = self._get_request_context()
        if context is None:
            return
        notification = types.ServerNotification(types.ToolListChangedNotification())
        await context.session.send_notification(notification, related_request_id=context.request_id)

    async def request_sampling(self, params: types.CreateMessageRequestParams) -> types.CreateMessageResult:
        return await self._sampling.create_message(params)

    async def request_elicitation(self, message: str, requested_schema: Mapping[str, Any]) -> types.ElicitResult:
        return await self._elicitation.request_form(message, requested_schema)

    async def request_url_elicitation(self, message: str, url: str, elicitation_id: str) -> types.ElicitResult:
        return await self._elicitation.request_url(message, url, elicitation_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        spec = self._tool_specs.get(name)
        if spec is None:
            return _error_result(f'Tool "{name}" is not available')

        try:
            result = spec.fn(**arguments)
            if inspect.isawaitable(result):
                result = await result
        except ToolError as exc:
            self._logger.info("tool %s failed [%s]: %s", name, exc.code, exc)
            return _error_result(f"{exc.code}: {exc}")
        except TypeError as exc:  # argument mismatch
            return _error_result(f"Invalid arguments: {exc}")
        except McpError as exc:
            return _error_result(exc.error.message)
        except Exception as exc:
            self._logger.exception("tool %s raised", name)
            return _error_result(f"Tool {name} failed: {exc}")

        if isinstance(result, types.CallToolResult):
            return result

        if isinstance(result, str):
            text = result
        else:
            try:
                text = json.dumps(result, ensure_ascii=False)
            except (TypeError, ValueError):
                text = str(result)

        return types.CallToolResult(content=[types.TextContent(type="text", text=text)])

    async def _execute_resource(self, uri: str) -> types.ReadResourceResult:
        spec = self._resource_specs.get(uri)
        if spec is not None:
            data = await self._call_reader(uri, spec.fn)
            return _resource_result(uri, data, spec.mime_type)

        for template in self._resource_template_specs.values():
            variables = template.match(uri)
            if variables is None:
                continue
            data = await self._call_reader(uri, template.fn, **variables)
            return _resource_result(uri, data, template.mime_type)

        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=f"Resource {uri} not found"))

    async def _call_reader(self, uri: str, fn: Callable[..., Any], **variables: str) -> Any:
        try:
            data = fn(**variables)
            if inspect.isawaitable(data):
                data = await data
        except McpError:
            raise
        except Exception as exc:
            self._logger.debug("resource %s failed: %s", uri, exc)
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(exc))) from exc
        return data

    async def _execute_prompt(
        self,
        name: str,
        arguments: dict[str, str] | None,
    ) -> types.GetPromptResult:
        spec = self._prompt_specs.get(name)
        if spec is None:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"Prompt '{name}' is not registered",
                )
            )

        provided = dict(arguments or {})
        missing = [arg.name for arg in (spec.arguments or []) if arg.required and arg.name not in provided]
        if missing:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"Missing required arguments: {', '.join(sorted(missing))}",
                )
            )

        try:
            if len(inspect.signature(spec.fn).parameters) == 0:
                rendered = spec.fn()
            else:
                rendered = spec.fn(provided)
            if inspect.isawaitable(rendered):
                rendered = await rendered
        except McpError:
            raise
        except Exception as exc:
            raise McpError(
                types.ErrorData(
                    code=types.INTERNAL_ERROR,
                    message=f"Prompt '{name}' failed: {exc}",
                )
            ) from exc

        return types.GetPromptResult(description=spec.description, messages=self._coerce_prompt_messages(rendered))

    def _coerce_prompt_messages(self, values: Any) -> list[types.PromptMessage]:
        if isinstance(values, (types.PromptMessage, Mapping)):
            values = [values]
        return [self._coerce_prompt_message(item) for item in values]

    def _coerce_prompt_message(self, item: Any) -> types.PromptMessage:
        if isinstance(item, types.PromptMessage):
            return item

        if isinstance(item, Mapping):
            role = item.get("role")
            content = item.get("content")
            if role is None or content is None:
                raise TypeError("Prompt message mapping requires 'role' and 'content'.")
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            role, content = item
        else:
            raise TypeError("Prompt message must be PromptMessage, mapping, or (role, content) tuple.")

        if isinstance(content, str):
            content = types.TextContent(type="text", text=content)
        elif isinstance(content, Mapping):
            content = types.TextContent(**content)
        return types.PromptMessage(role=str(role), content=content)  # type: ignore[arg-type]

    async def _execute_completion(
        self,
        ref: types.PromptReference | types.ResourceTemplateReference,
        argument: types.CompletionArgument,
        context: types.CompletionContext | None,
    ) -> types.Completion | None:
        if isinstance(ref, types.PromptReference):
            spec = self._completion_specs.get(("prompt", ref.name))
        else:
            spec = self._completion_specs.get(("resource", ref.uri))
        if spec is None:
            return types.Completion(values=[], total=None, hasMore=None)

        result = spec.fn(argument, context)
        if inspect.isawaitable(result):
            result = await result

        if result is None or isinstance(result, types.Completion):
            return result
        if isinstance(result, CompletionResult):
            values, total, has_more = list(result.values), result.total, result.has_more
        elif isinstance(result, Iterable) and not isinstance(result, str):
            values, total, has_more = list(result), None, None
        else:
            raise TypeError(f"Unsupported completion return type: {type(result)!r}")

        limit = 100
        if len(values) > limit:
            values, has_more = values[:limit], True
        return types.Completion(values=[str(value) for value in values], total=total, hasMore=has_more)

    def _get_request_context(self) -> RequestContext[ServerSession, Any, Any] | None:
        try:
            return request_ctx.get()
        except LookupError:
            return None

    def _current_tool_name(self, context: RequestContext[ServerSession, Any, Any]) -> str | None:
        request = context.request
        params = getattr(request, "params", None) if request is not None else None
        return getattr(params, "name", None)

    def _paginate(
        self,
        items: list[Any],
        cursor: str | None,
        *,
        limit: int | None = None,
    ) -> tuple[list[Any], str | None]:
        if limit is None:
            limit = self._pagination_limit

        start = 0
        if cursor:
            try:
                start = max(0, int(cursor))
            except ValueError:
                raise McpError(
                    types.ErrorData(
                        code=types.INVALID_PARAMS,
                        message="Invalid cursor provided",
                    )
                ) from None

        end = start + limit
        page = items[start:end]
        next_cursor = str(end) if end < len(items) else None
        return page, next_cursor

    def _build_input_schema(self, fn: Callable[..., Any]) -> dict[str, Any]:
        try:
            sig = inspect.signature(fn, eval_str=True)
        except (NameError, SyntaxError, TypeError):
            sig = inspect.signature(fn)
        annotations: dict[str, Any] = {}
        default_values: dict[str, Any] = {}

        for name, param in sig.parameters.items():
            if param.kind not in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY):
                return {"type": "object"}

            annotation = param.annotation if param.annotation is not inspect.Parameter.empty else Any
            if param.default is inspect.Parameter.empty:
                annotations[name] = annotation
            else:
                annotations[name] = NotRequired[annotation]
                default_values[name] = param.default

        if not annotations:
            return {"type": "object", "properties": {}}

        namespace = {"__annotations__": annotations}
        typed_dict = pytypes.new_class(
            f"{fn.__name__.title()}ToolInput",
            (TypedDict,),
            {},
            lambda ns: ns.update(namespace),
        )

        try:
            schema = TypeAdapter(typed_dict).json_schema()
        except Exception:
            # Unsupported annotations fall back to a permissive schema.
            return {"type": "object", "additionalProperties": True}

        schema.pop("$defs", None)
        schema.pop("title", None)

        properties = schema.setdefault("properties", {})
        for name, default in default_values.items():
            properties.setdefault(name, {})
            if default is not None:
                properties[name].setdefault("default", default)

        schema.setdefault("type", "object")
        return schema

    # ------------------------------------------------------------------
    # Convenience helpers for tests / advanced users
    # ------------------------------------------------------------------

    @property
    def tool_names(self) -> list[str]:
        """Return the names of currently exposed tools."""

        return sorted(self._tool_defs)

    @property
    def prompt_names(self) -> list[str]:
        return sorted(self._prompt_defs)

    @property
    def resource_uris(self) -> list[str]:
        return sorted(self._resource_defs)

    @property
    def resource_template_uris(self) -> list[str]:
        return [template.uriTemplate for template in self._resource_template_defs]

    def get_tool(self, name: str) -> types.Tool | None:
        return self._tool_defs.get(name)

    async def invoke_tool(self, name: str, **arguments: Any) -> types.CallToolResult:
        """Invoke a tool directly, bypassing JSON-RPC plumbing (useful for tests)."""

        return await self._execute_tool(name, arguments)

    async def invoke_resource(self, uri: str) -> types.ReadResourceResult:
        """Read a registered resource or template directly."""

        return await self._execute_resource(uri)

    async def invoke_prompt(
        self,
        name: str,
        *,
        arguments: dict[str, str] | None = None,
    ) -> types.GetPromptResult:
        """Render a prompt by name (test helper)."""

        return await self._execute_prompt(name, arguments)

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def serve_stdio(self, *, raise_exceptions: bool = False) -> None:
        """Run the server over STDIO until the pipe closes.

        One implicit session: no token, no multiplexing.
        """

        from mcp.server.stdio import stdio_server

        init_options = self.create_initialization_options()

        async with stdio_server() as (read_stream, write_stream):
            await self.run(
                read_stream,
                write_stream,
                init_options,
                raise_exceptions=raise_exceptions,
            )


def _cursor_of(request: Any) -> str | None:
    params = getattr(request, "params", None)
    return params.cursor if params is not None else None


def _error_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)], isError=True)


def _resource_result(uri: str, data: Any, mime_type: str | None) -> types.ReadResourceResult:
    if isinstance(data, types.ReadResourceResult):
        return data
    if isinstance(data, bytes):
        return types.ReadResourceResult(
            contents=[
                types.BlobResourceContents(
                    uri=uri,  # type: ignore[arg-type]
                    blob=base64.b64encode(data).decode(),
                    mimeType=mime_type or "application/octet-stream",
                )
            ]
        )
    return types.ReadResourceResult(
        contents=[
            types.TextResourceContents(
                uri=uri,  # type: ignore[arg-type]
                text=str(data),
                mimeType=mime_type or "text/plain",
            )
        ]
    )


__all__ = ["MCPServer", "NotificationFlags"]
