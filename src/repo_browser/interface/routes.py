"""API routes — thin controllers that delegate to the use case.

Every object-store call blocks, so each handler hands its whole unit of
work to the thread pool in a single call.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool

from repo_browser.domain.entities import TreeView
from repo_browser.interface.dependencies import (
    AppContext,
    get_browser,
    get_context,
    get_repo_name,
)
from repo_browser.interface.schemas import (
    BlobResponse,
    CommitResponse,
    FeedResponse,
    HomeResponse,
    IndexResponse,
    LogResponse,
    ReferenceOut,
    RefsResponse,
    RepositoryOut,
    TreeResponse,
)
from repo_browser.services import links
from repo_browser.services.browse import RepositoryBrowser
from repo_browser.services.tree_resolver import guess_mime_type

router = APIRouter()

_METHODS = ["GET", "HEAD"]
_FEED_MEDIA_TYPE = "application/feed+json"


def _feed_response(feed: FeedResponse) -> JSONResponse:
    return JSONResponse(content=feed.model_dump(mode="json"), media_type=_FEED_MEDIA_TYPE)


@router.api_route("/", methods=_METHODS, response_model=IndexResponse)
async def index(
    context: AppContext = Depends(get_context),
    browser: RepositoryBrowser = Depends(get_browser),
) -> IndexResponse:
    """List every published repository."""
    repositories = await run_in_threadpool(browser.repositories)
    return IndexResponse(
        site_name=context.settings.site_name,
        emoji_favicon=context.settings.emoji_favicon,
        repositories=[RepositoryOut.model_validate(r) for r in repositories],
    )


@router.api_route("/{repo_name}", methods=_METHODS, response_model=HomeResponse)
@router.api_route("/{repo_name}/", methods=_METHODS, response_model=HomeResponse)
async def repo_home(
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> HomeResponse:
    """Repository summary and rendered README."""
    home = await run_in_threadpool(browser.home, repo_name)
    return HomeResponse.model_validate(home)


# ── History ─────────────────────────────────────────────────────────────────


@router.api_route("/{repo_name}/log/feed.json", methods=_METHODS)
async def log_feed(
    request: Request,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> JSONResponse:
    feed = await run_in_threadpool(browser.log_feed, repo_name, str(request.url))
    return _feed_response(FeedResponse.from_feed(feed))


@router.api_route("/{repo_name}/log", methods=_METHODS, response_model=LogResponse)
@router.api_route("/{repo_name}/log/{ref}", methods=_METHODS, response_model=LogResponse)
@router.api_route(
    "/{repo_name}/log/{ref}/item/{path:path}", methods=_METHODS, response_model=LogResponse
)
async def repo_log(
    ref: str | None = None,
    path: str = "",
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> LogResponse:
    """One page of history; ``ref`` doubles as the pagination cursor."""
    page = await run_in_threadpool(browser.log, repo_name, ref, path)
    return LogResponse.model_validate(page)


# ── References ──────────────────────────────────────────────────────────────


@router.api_route("/{repo_name}/refs", methods=_METHODS, response_model=RefsResponse)
async def repo_refs(
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> RefsResponse:
    refs = await run_in_threadpool(browser.refs, repo_name)
    return RefsResponse.model_validate(refs)


@router.api_route("/{repo_name}/refs/feed.json", methods=_METHODS)
async def refs_feed(
    request: Request,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> JSONResponse:
    feed = await run_in_threadpool(browser.refs_feed, repo_name, str(request.url))
    return _feed_response(FeedResponse.from_feed(feed))


@router.api_route("/{repo_name}/refs/{tag}", methods=_METHODS, response_model=ReferenceOut)
async def repo_tag(
    tag: str,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> ReferenceOut | Response:
    """Annotated tag detail; anything else redirects to the commit view."""
    entry = await run_in_threadpool(browser.annotated_tag, repo_name, tag)
    if entry is None:
        return RedirectResponse(links.commit_url(repo_name, tag), status_code=308)
    return ReferenceOut.model_validate(entry)


# ── Trees and blobs ─────────────────────────────────────────────────────────


@router.api_route("/{repo_name}/tree/{ref}/raw/{path:path}", methods=_METHODS)
async def repo_raw(
    ref: str,
    path: str,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> Response:
    """Exact blob bytes, bypassing all rendering."""
    raw = await run_in_threadpool(browser.raw, repo_name, ref, path)
    return Response(content=raw.data, media_type=raw.media_type)


@router.api_route(
    "/{repo_name}/tree", methods=_METHODS, response_model=TreeResponse | BlobResponse
)
@router.api_route(
    "/{repo_name}/tree/{ref}", methods=_METHODS, response_model=TreeResponse | BlobResponse
)
@router.api_route(
    "/{repo_name}/tree/{ref}/item/{path:path}",
    methods=_METHODS,
    response_model=TreeResponse | BlobResponse,
)
async def repo_tree(
    ref: str | None = None,
    path: str = "",
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> TreeResponse | BlobResponse:
    """Directory listing or rendered file."""
    view = await run_in_threadpool(browser.tree, repo_name, ref, path)
    if isinstance(view, TreeView):
        return TreeResponse.model_validate(view)
    return BlobResponse.model_validate(view)


# ── Commits ─────────────────────────────────────────────────────────────────


@router.api_route("/{repo_name}/commit/{commit}.patch", methods=_METHODS)
async def repo_patch(
    commit: str,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> Response:
    patch = await run_in_threadpool(browser.patch, repo_name, commit)
    media_type = guess_mime_type(f"{commit}.patch") or "text/x-diff"
    return Response(content=patch, media_type=media_type)


@router.api_route("/{repo_name}/commit/{commit}", methods=_METHODS, response_model=CommitResponse)
async def repo_commit(
    commit: str,
    repo_name: str = Depends(get_repo_name),
    browser: RepositoryBrowser = Depends(get_browser),
) -> CommitResponse:
    """Commit detail with the highlighted diff against its first parent."""
    view = await run_in_threadpool(browser.commit, repo_name, commit)
    return CommitResponse.model_validate(view)
