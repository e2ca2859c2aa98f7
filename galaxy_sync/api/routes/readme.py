"""
README passthrough for collection entities.

Fetches a single file from a configured SCM integration and returns it
as markdown.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from galaxy_sync.api.auth import verify_api_key
from galaxy_sync.api.dependencies import get_client_factory
from galaxy_sync.api.models import ErrorResponse
from galaxy_sync.errors import ConfigurationError, UnsupportedProviderError
from galaxy_sync.scm.factory import ScmClientFactory
from galaxy_sync.scm.schemas import RepositoryInfo

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/git_readme_content",
    response_class=PlainTextResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Fetch a README from an SCM repository",
)
async def get_readme_content(
    scm_provider: str | None = Query(default=None, alias="scmProvider"),
    host: str | None = Query(default=None),
    owner: str | None = Query(default=None),
    repo: str | None = Query(default=None),
    file_path: str | None = Query(default=None, alias="filePath"),
    ref: str | None = Query(default=None),
    api_key: str = Depends(verify_api_key),
    factory: ScmClientFactory = Depends(get_client_factory),
) -> PlainTextResponse:
    params = {
        "scmProvider": scm_provider,
        "host": host,
        "owner": owner,
        "repo": repo,
        "filePath": file_path,
        "ref": ref,
    }
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required query parameters: {', '.join(missing)}",
        )

    try:
        client = factory.create_client(scm_provider, owner, host)
    except UnsupportedProviderError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConfigurationError as e:
        logger.warning(f"Failed to fetch README: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    logger.info(f"Fetching README from {scm_provider}://{host}/{owner}/{repo}/{file_path}@{ref}")
    repository = RepositoryInfo(
        name=repo,
        full_path=f"{owner}/{repo}",
        default_branch=ref,
        url=f"https://{host}/{owner}/{repo}",
    )

    try:
        async with client:
            content = await client.read_file(repository, ref, file_path)
    except Exception as e:
        logger.warning(f"Failed to fetch README: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if content is None:
        logger.warning(f"Failed to fetch README: {file_path} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{file_path} not found in {owner}/{repo}@{ref}",
        )

    return PlainTextResponse(content, media_type="text/markdown")
