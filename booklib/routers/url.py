"""
URL Router

POST /url/clean normalizes a URL for canonical links and redirects.
"""

from fastapi import APIRouter, Request

from booklib.config import get_settings
from booklib.schemas.url import URLCleanRequest, URLCleanResponse
from booklib.services.rate_limiter import limiter
from booklib.services.url_cleaner import clean_url

settings = get_settings()

router = APIRouter(prefix="/url", tags=["URL Tools"])


@router.post(
    "/clean",
    response_model=URLCleanResponse,
    summary="Clean a URL",
    description="""
    - **canonical**: remove query and fragment, trim trailing slash
    - **redirection**: https, lowercase `www.` host, lowercase path
    - **all**: canonical then redirection
    """,
)
@limiter.limit(settings.rate_limit_default)
def clean(request: Request, body: URLCleanRequest) -> URLCleanResponse:
    return URLCleanResponse(processed_url=clean_url(body.url, body.operation))
