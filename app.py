import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from linkedin_lookup_pkg.config import LookupSettings
from linkedin_lookup_pkg.models import LookupRequest
from linkedin_lookup_pkg.orchestrator import LinkedInLookup
from linkedin_lookup_pkg.response import build_error
from linkedin_lookup_pkg.scraper_logging import init_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_logging()
    settings = LookupSettings.from_env()
    app.state.settings = settings
    app.state.lookup = LinkedInLookup(settings)
    try:
        yield
    finally:
        await app.state.lookup.aclose()


app = FastAPI(lifespan=lifespan)


def _lookup_for(request: Request, data: LookupRequest) -> LinkedInLookup:
    # A headless override gets its own lookup and token.
    if data.headless is None or data.headless == request.app.state.settings.headless:
        return request.app.state.lookup
    settings = request.app.state.settings.model_copy(update={"headless": data.headless})
    return LinkedInLookup(settings)


@app.post("/lookup/linkedin")
async def lookup_linkedin(data: LookupRequest, request: Request):
    if not data.url or "linkedin.com" not in data.url:
        return JSONResponse(status_code=400, content=build_error("Invalid URL"))

    lookup = _lookup_for(request, data)
    try:
        result = await lookup.get_company_or_people_details(
            data.url,
            force_people_scraping=data.force_people_scraping,
            skip_company_scraping=data.skip_company_scraping,
        )
    except Exception as e:
        logger.exception("Lookup failed for %s", data.url)
        return JSONResponse(status_code=500, content=build_error(str(e)))
    finally:
        if lookup is not request.app.state.lookup:
            await lookup.aclose()

    if "error" in result:
        return JSONResponse(status_code=422, content=result)
    return result


@app.get("/health")
def health(): return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
