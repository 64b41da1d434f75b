import os
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from .routes import router
from .core import redis_startup, init_metrics, shutdown_connections
from .catalog import catalog
from .errors import AnimeTrackError
from .file_storage import UPLOAD_DIR, UPLOAD_URL_PREFIX
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('animetrack')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

app = FastAPI(title="AnimeTrack API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv('ALLOWED_ORIGINS', '*').split(',')],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(router, prefix="/api")

os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=UPLOAD_DIR), name='uploads')

@app.get('/healthz')
async def healthz():
    return {'status': 'ok'}

@app.exception_handler(AnimeTrackError)
async def domain_error_handler(request: Request, exc: AnimeTrackError):
    logger.info({'msg': 'request_rejected', 'path': request.url.path, 'code': exc.code})
    return JSONResponse(status_code=exc.status_code, content={'message': exc.message, 'code': exc.code})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={'message': exc.detail, 'detail': exc.detail},
        headers=getattr(exc, 'headers', None),
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    error_id = uuid.uuid4().hex[:8]
    logger.error({'msg': 'unhandled_exception', 'error_id': error_id, 'method': request.method, 'path': request.url.path}, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={'message': 'An internal server error occurred. Please try again later.', 'error_id': error_id},
    )

@app.middleware('http')
async def log_requests(request: Request, call_next):
    logger.info({'msg':'request_start','method':request.method,'path':request.url.path})
    response = await call_next(request)
    logger.info({'msg':'request_end','status': response.status_code})
    return response

@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    try:
        await redis_startup()
    except Exception as e:
        logger.warning({'msg': 'redis_start_failed', 'error': str(e)})
    try:
        init_metrics()
    except Exception as e:
        logger.warning({'msg': 'metrics_init_failed', 'error': str(e)})

@app.on_event("shutdown")
async def shutdown():
    await catalog.aclose()
    await shutdown_connections()
