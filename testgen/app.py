# testgen/app.py
import time
from typing import List

# Load .env BEFORE any testgen imports (they read env vars at import time)
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request, Path
from fastapi.responses import JSONResponse, Response, PlainTextResponse

from testgen.orchestrator import GenerationOrchestrator
from testgen.providers.factory import provider_from_env
from testgen.errors import GenerationError
from testgen.schemas import CreateGenerationRequest, GenerationOut
from testgen import monitoring
from testgen import auth as authmod
from testgen import db as dbmod

app = FastAPI(title="Unit Test Generation API")

# Initialize DB tables on startup
dbmod.init_db()

# provider is selected once; a config error makes every generation fail with it
orchestrator = GenerationOrchestrator(provider_from_env())

API_KEY_HEADER = "x-api-key"
OWNER_HEADER = "x-owner-id"


# ---------------------------------------------------------------------------
# Auth + rate-limit middleware (runs first on /api/* paths)
# ---------------------------------------------------------------------------
@app.middleware("http")
async def api_key_and_rate_limit_middleware(request: Request, call_next):
    path = request.url.path
    if not path.startswith("/api/"):
        return await call_next(request)

    owner_id = authmod.resolve_owner(
        request.headers.get(API_KEY_HEADER),
        request.headers.get(OWNER_HEADER),
    )
    if owner_id is None:
        return JSONResponse(
            status_code=401,
            content={"status": "error", "error_code": "E_UNAUTHORIZED", "message": "Missing or invalid API key"},
        )

    allowed, remaining = authmod.check_rate_limit(owner_id)
    if not allowed:
        resp = JSONResponse(
            status_code=429,
            content={"status": "error", "error_code": "E_RATE_LIMIT", "message": "Rate limit exceeded"},
        )
        resp.headers["Retry-After"] = "60"
        return resp

    request.state.owner_id = owner_id
    return await call_next(request)


# ---------------------------------------------------------------------------
# Metrics middleware
# ---------------------------------------------------------------------------
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    endpoint = request.url.path
    method = request.method
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        return response
    except Exception:
        monitoring.logger.exception("Unhandled exception in request", extra={"path": endpoint})
        raise
    finally:
        monitoring.observe_request(start, endpoint, method, status)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@app.post("/api/generations", status_code=201, response_model=GenerationOut)
async def create_generation(req: CreateGenerationRequest, request: Request):
    """
    POST /api/generations
    Body: { "code": "...", "language": "python" }
    """
    owner_id = request.state.owner_id
    monitoring.logger.info(
        "Received /api/generations request",
        extra={"owner_id": owner_id, "language": req.language, "code_chars": len(req.code)},
    )
    return await orchestrator.create(owner_id, req.code, req.language)


@app.get("/api/generations", response_model=List[GenerationOut])
def list_generations(request: Request):
    """GET /api/generations: the caller's generations, newest first."""
    return orchestrator.find_all_by_owner(request.state.owner_id)


@app.get("/api/generations/{generation_id}", response_model=GenerationOut)
def get_generation(request: Request, generation_id: str = Path(..., description="Generation ID to fetch")):
    """
    GET /api/generations/{generation_id}
    Another owner's generation answers 404, same as a missing one.
    """
    return orchestrator.find_one(generation_id, request.state.owner_id)


@app.get("/health")
async def health():
    return {"status": "ok", "provider": orchestrator.provider.provider_name}


@app.get("/metrics")
async def metrics():
    if not monitoring.PROMETHEUS_ENABLED:
        return PlainTextResponse("Prometheus disabled", status_code=404)
    payload, content_type = monitoring.prometheus_metrics_response()
    return Response(content=payload, media_type=content_type)
