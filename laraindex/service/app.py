"""FastAPI application exposing project index queries."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..facade import ProjectIndex
from ..models import ArtifactKind, RouteDefinition, SiteHandle, Usage

T = TypeVar("T")


class HealthResponse(BaseModel):
    status: str
    root: Optional[str] = None


class SiteModel(BaseModel):
    path: str
    line: int

    @classmethod
    def from_site(cls, site: SiteHandle) -> "SiteModel":
        return cls(path=site.path, line=site.line)


class UsageModel(BaseModel):
    file: str
    line_number: int
    usage_kind: str

    @classmethod
    def from_usage(cls, usage: Usage) -> "UsageModel":
        return cls(file=usage.file, line_number=usage.line_number, usage_kind=usage.usage_kind.value)


class RouteSummary(BaseModel):
    key: str
    name: Optional[str] = None
    method: str
    path: str
    controller: Optional[str] = None
    middleware: List[str] = []


class MiddlewareModel(BaseModel):
    name: str
    parameters: List[str] = []
    source: str


class ParameterModel(BaseModel):
    name: str
    type: str
    optional: bool
    pattern: Optional[str] = None


class ActionModel(BaseModel):
    controller: Optional[str] = None
    method: Optional[str] = None
    namespace: Optional[str] = None
    is_closure: bool = False


class RouteDetail(BaseModel):
    key: str
    name: Optional[str] = None
    method: str
    uri: str
    action: ActionModel
    middleware: List[MiddlewareModel] = []
    parameters: List[ParameterModel] = []
    domain: Optional[str] = None
    prefix: str = ""
    where: Dict[str, str] = {}
    declarations: List[SiteModel] = []
    usages: List[UsageModel] = []


class TranslationSummary(BaseModel):
    key: str
    locale: str
    value: str


class TranslationDetail(TranslationSummary):
    values: Dict[str, str] = {}
    declarations: List[SiteModel] = []
    usages: List[UsageModel] = []


class ViewSummary(BaseModel):
    name: str
    path: str
    file: str


class AssetSummary(BaseModel):
    name: str
    path: str
    type: str
    file: str


class LookupResponse(BaseModel):
    text: str
    kind: Optional[str] = None


class RefreshResponse(BaseModel):
    status: str
    routes: int
    translations: int
    views: int
    assets: int
    usages: int
    files_scanned: int


def _route_detail(key: str, definition: RouteDefinition, index: ProjectIndex) -> RouteDetail:
    return RouteDetail(
        key=key,
        name=definition.name,
        method=definition.method,
        uri=definition.uri,
        action=ActionModel(
            controller=definition.action.controller,
            method=definition.action.method,
            namespace=definition.action.namespace,
            is_closure=definition.action.is_closure,
        ),
        middleware=[
            MiddlewareModel(name=item.name, parameters=list(item.parameters), source=item.source.value)
            for item in definition.middleware
        ],
        parameters=[
            ParameterModel(
                name=parameter.name,
                type=parameter.inferred_type,
                optional=parameter.optional,
                pattern=parameter.constraint_pattern,
            )
            for parameter in definition.parameters
        ],
        domain=definition.domain,
        prefix=definition.prefix,
        where=dict(definition.where),
        declarations=[SiteModel.from_site(site) for site in index.find_route_declaration(key)],
        usages=[UsageModel.from_usage(usage) for usage in index.get_route_usages(key)],
    )


async def _run(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _default_index() -> ProjectIndex:
    return ProjectIndex.open(Path.cwd())


def create_app(
    index_factory: Callable[[], ProjectIndex] = _default_index,
) -> FastAPI:
    """Create the FastAPI application serving one project index.

    The factory runs once, on the first request that needs the index.
    """

    app = FastAPI(title="LaraIndex Service", version="1.0.0")
    lock = threading.Lock()

    def _index() -> ProjectIndex:
        with lock:
            index = getattr(app.state, "index", None)
            if index is None:
                index = index_factory()
                app.state.index = index
            return index

    async def get_index() -> ProjectIndex:
        return await _run(_index)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        index = getattr(app.state, "index", None)
        return HealthResponse(status="ok", root=str(index.root) if index is not None else None)

    @app.get("/routes", response_model=List[RouteSummary])
    async def list_routes(index: ProjectIndex = Depends(get_index)) -> List[RouteSummary]:
        def _collect() -> List[RouteSummary]:
            return [
                RouteSummary(
                    key=route.name or route.path,
                    name=route.name,
                    method=route.method,
                    path=route.path,
                    controller=route.controller,
                    middleware=list(route.middleware),
                )
                for route in index.get_declared_routes()
            ]

        return await _run(_collect)

    @app.get("/routes/{key:path}", response_model=RouteDetail)
    async def show_route(key: str, index: ProjectIndex = Depends(get_index)) -> RouteDetail:
        def _describe() -> Optional[RouteDetail]:
            definition = index.describe_route(key)
            if definition is None:
                return None
            return _route_detail(key, definition, index)

        detail = await _run(_describe)
        if detail is None:
            raise HTTPException(status_code=404, detail=f"Unknown route: {key}")
        return detail

    @app.get("/translations", response_model=List[TranslationSummary])
    async def list_translations(index: ProjectIndex = Depends(get_index)) -> List[TranslationSummary]:
        def _collect() -> List[TranslationSummary]:
            return [
                TranslationSummary(
                    key=key,
                    locale=index.get_translation_locale(key),
                    value=index.get_translation_value(key),
                )
                for key in index.get_all_translations()
            ]

        return await _run(_collect)

    @app.get("/translations/{key:path}", response_model=TranslationDetail)
    async def show_translation(key: str, index: ProjectIndex = Depends(get_index)) -> TranslationDetail:
        def _describe() -> Optional[TranslationDetail]:
            if not index.is_translation(key):
                return None
            return TranslationDetail(
                key=key,
                locale=index.get_translation_locale(key),
                value=index.get_translation_value(key),
                values={info.locale: info.value for info in index.translations.declarations(key)},
                declarations=[SiteModel.from_site(site) for site in index.find_translation_declarations(key)],
                usages=[UsageModel.from_usage(usage) for usage in index.get_translation_usages(key)],
            )

        detail = await _run(_describe)
        if detail is None:
            raise HTTPException(status_code=404, detail=f"Unknown translation: {key}")
        return detail

    @app.get("/views", response_model=List[ViewSummary])
    async def list_views(index: ProjectIndex = Depends(get_index)) -> List[ViewSummary]:
        def _collect() -> List[ViewSummary]:
            summaries = []
            for name in index.get_all_views():
                info = index.views.get(name)
                if info is not None:
                    summaries.append(ViewSummary(name=name, path=info.path, file=info.file))
            return summaries

        return await _run(_collect)

    @app.get("/assets", response_model=List[AssetSummary])
    async def list_assets(index: ProjectIndex = Depends(get_index)) -> List[AssetSummary]:
        def _collect() -> List[AssetSummary]:
            summaries = []
            for name in index.get_all_assets():
                info = index.assets.get(name)
                if info is not None:
                    summaries.append(
                        AssetSummary(name=name, path=info.path, type=info.type.value, file=info.file)
                    )
            return summaries

        return await _run(_collect)

    @app.get("/lookup", response_model=LookupResponse)
    async def lookup(text: str, index: ProjectIndex = Depends(get_index)) -> LookupResponse:
        kind = await _run(lambda: index.classify(text))
        return LookupResponse(text=text, kind=kind.value if kind is not None else None)

    @app.get("/usages/{kind}/{key:path}", response_model=List[UsageModel])
    async def usages(kind: str, key: str, index: ProjectIndex = Depends(get_index)) -> List[UsageModel]:
        try:
            artifact = ArtifactKind(kind)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown artifact kind: {kind}") from None
        found = await _run(lambda: index.get_usages(artifact, key))
        return [UsageModel.from_usage(usage) for usage in found]

    @app.post("/refresh", response_model=RefreshResponse)
    async def refresh(index: ProjectIndex = Depends(get_index)) -> RefreshResponse:
        def _refresh() -> Dict[str, int]:
            index.refresh()
            return index.summary()

        counts = await _run(_refresh)
        return RefreshResponse(status="ok", **counts)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    root: str | Path = ".", host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    project = Path(root)
    app = create_app(lambda: ProjectIndex.open(project))
    uvicorn.run(app, host=host, port=port)
