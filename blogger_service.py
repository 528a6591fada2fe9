import logging
from typing import Optional
from uuid import UUID
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_fastapi_instrumentator.metrics import Info
from prometheus_client import Counter

from blogger.config import (
    ALLOWED_ORIGINS,
    CACHE_ENABLED,
    CACHE_TTL,
    REDIS_URL,
    REQUEST_LATENCY_BUCKETS,
)
from blogger.cache import BlogCache
from blogger.database import BlogDatabase
from blogger.exceptions import (
    BlogError,
    CategoryAlreadyExistsError,
    ConflictError,
    NotFoundError,
)
from blogger.models.schemas import Category, CategoryRequest, Post, PostRequest
from blogger.repositories import CategoryRepository, PostRepository
from blogger.services import CategoryService, PostService

# --- 기본 로깅 ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger('BloggerServiceApp')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources.

    A database or cache already placed on ``app.state`` is used as is.
    """
    if getattr(app.state, "database", None) is None:
        app.state.database = BlogDatabase()
    if getattr(app.state, "cache", None) is None:
        app.state.cache = BlogCache(REDIS_URL if CACHE_ENABLED else None, ttl=CACHE_TTL)

    # Startup
    await app.state.database.initialize()
    await app.state.cache.initialize()
    logger.info("Blogger service initialized: database and cache ready")
    yield
    # Shutdown
    await app.state.database.close()
    await app.state.cache.close()
    logger.info("Blogger service shutdown: database and cache closed")

app = FastAPI(
    title="Blogger Box",
    description="Categories and posts of a blog",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

# Prometheus 메트릭 설정
# status 레이블은 2xx, 4xx, 5xx 형태로 그룹화됨
http_requests_total_custom = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ("method", "status"),
)

def http_requests_total_custom_metric(info: Info) -> None:
    http_requests_total_custom.labels(info.method, info.modified_status).inc()

def configure_metrics(application: FastAPI) -> None:
    """Configure Prometheus request latency metrics with custom buckets."""
    instrumentator = Instrumentator()
    instrumentator.add(metrics.latency(buckets=REQUEST_LATENCY_BUCKETS))
    instrumentator.add(http_requests_total_custom_metric)
    instrumentator.instrument(application).expose(application)


configure_metrics(app)


# --- 에러 매핑 ---
@app.exception_handler(BlogError)
async def handle_blog_error(request: Request, exc: BlogError):
    if isinstance(exc, NotFoundError):
        status_code, label = 404, "NOT FOUND"
    elif isinstance(exc, CategoryAlreadyExistsError):
        status_code, label = 400, "BAD REQUEST"
    elif isinstance(exc, ConflictError):
        status_code, label = 409, "CONFLICT"
    else:
        status_code, label = 400, "BAD REQUEST"

    logger.warning(f"[{label}] {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.error_code, "detail": str(exc)},
    )


# --- 의존성 ---
def get_database(request: Request) -> BlogDatabase:
    return request.app.state.database

def get_cache(request: Request) -> BlogCache:
    return request.app.state.cache

def get_category_service(db: BlogDatabase = Depends(get_database)) -> CategoryService:
    return CategoryService(CategoryRepository(db), PostRepository(db))

def get_post_service(
    db: BlogDatabase = Depends(get_database),
    category_service: CategoryService = Depends(get_category_service),
) -> PostService:
    return PostService(PostRepository(db), category_service)


# --- Categories API ---
@app.get("/v1/categories", tags=["Categories"])
async def handle_get_categories(
    name: Optional[str] = Query(None),
    categories: CategoryService = Depends(get_category_service),
    cache: BlogCache = Depends(get_cache),
):
    """모든 카테고리 목록을 반환합니다. name이 주어지면 이름 부분 일치로 필터링합니다."""
    if name is not None and name.strip():
        return await categories.search(name)

    cached = await cache.get_categories()
    if cached is not None:
        return JSONResponse(content=cached)

    content = jsonable_encoder(await categories.list_all())
    await cache.set_categories(content)
    return JSONResponse(content=content)

@app.get("/v1/categories/{category_id}", response_model=Category, tags=["Categories"])
async def handle_get_category(
    category_id: UUID,
    categories: CategoryService = Depends(get_category_service),
):
    """ID로 특정 카테고리를 찾아 반환합니다."""
    return await categories.get_by_id(category_id)

@app.post("/v1/categories", status_code=201, tags=["Categories"])
async def create_category(
    payload: CategoryRequest,
    categories: CategoryService = Depends(get_category_service),
    cache: BlogCache = Depends(get_cache),
):
    category = await categories.create(payload.name)
    await cache.invalidate()
    return JSONResponse(
        status_code=201,
        content=jsonable_encoder(category),
        headers={"Location": f"/v1/categories/{category.id}"},
    )

@app.put("/v1/categories/{category_id}", response_model=Category, tags=["Categories"])
async def rename_category(
    category_id: UUID,
    payload: CategoryRequest,
    categories: CategoryService = Depends(get_category_service),
    cache: BlogCache = Depends(get_cache),
):
    category = await categories.rename(category_id, payload.name)
    await cache.invalidate()
    return category

@app.delete("/v1/categories/{category_id}", tags=["Categories"])
async def delete_category(
    category_id: UUID,
    categories: CategoryService = Depends(get_category_service),
    cache: BlogCache = Depends(get_cache),
):
    deleted = await categories.delete(category_id)
    await cache.invalidate()
    return deleted

@app.get("/v1/categories/{category_id}/posts", tags=["Categories"])
async def handle_get_category_posts(
    category_id: UUID,
    categories: CategoryService = Depends(get_category_service),
    posts: PostService = Depends(get_post_service),
):
    """카테고리에 속한 게시물 목록을 반환합니다. 카테고리가 없으면 404."""
    await categories.get_by_id(category_id)
    return await posts.list_by_category(category_id)


# --- Posts API ---
@app.get("/v1/posts", tags=["Posts"])
async def handle_get_posts(
    topic: Optional[str] = Query(None),
    posts: PostService = Depends(get_post_service),
    cache: BlogCache = Depends(get_cache),
):
    """모든 게시물 목록을 생성일 오름차순으로 반환합니다. topic이 주어지면 제목/본문으로 검색합니다."""
    if topic is not None:
        return await posts.search(topic)

    cached = await cache.get_posts()
    if cached is not None:
        return JSONResponse(content=cached)

    content = jsonable_encoder(await posts.list_all())
    await cache.set_posts(content)
    return JSONResponse(content=content)

@app.get("/v1/posts/{post_id}", response_model=Post, tags=["Posts"])
async def handle_get_post(
    post_id: UUID,
    posts: PostService = Depends(get_post_service),
):
    """ID로 특정 게시물을 찾아 반환합니다."""
    return await posts.get_by_id(post_id)

@app.post("/v1/posts", status_code=201, tags=["Posts"])
async def create_post(
    payload: PostRequest,
    posts: PostService = Depends(get_post_service),
    cache: BlogCache = Depends(get_cache),
):
    post = await posts.create(payload.title, payload.content, payload.category_id)
    await cache.invalidate()
    return JSONResponse(
        status_code=201,
        content=jsonable_encoder(post),
        headers={"Location": f"/v1/posts/{post.id}"},
    )

@app.put("/v1/posts/{post_id}", response_model=Post, tags=["Posts"])
async def update_post(
    post_id: UUID,
    payload: PostRequest,
    posts: PostService = Depends(get_post_service),
    cache: BlogCache = Depends(get_cache),
):
    post = await posts.update(post_id, payload.title, payload.content, payload.category_id)
    await cache.invalidate()
    return post

@app.delete("/v1/posts/{post_id}", tags=["Posts"])
async def delete_post(
    post_id: UUID,
    posts: PostService = Depends(get_post_service),
    cache: BlogCache = Depends(get_cache),
):
    deleted = await posts.delete(post_id)
    await cache.invalidate()
    return deleted


@app.get("/health")
async def handle_health(db: BlogDatabase = Depends(get_database)):
    """Kubernetes를 위한 헬스 체크 엔드포인트"""
    if not await db.health_check():
        return JSONResponse(status_code=503, content={"status": "unavailable", "service": "blogger-service"})
    return {"status": "ok", "service": "blogger-service"}

@app.get("/stats")
async def handle_stats(
    categories: CategoryService = Depends(get_category_service),
    posts: PostService = Depends(get_post_service),
):
    """대시보드를 위한 통계 엔드포인트"""
    try:
        category_count = await categories.count()
        post_count = await posts.count()
    except Exception as e:
        logger.error(f"Failed to get counts: {e}", exc_info=True)
        category_count = post_count = 0

    return {
        "blogger_service": {
            "service_status": "online",
            "category_count": category_count,
            "post_count": post_count,
        }
    }

if __name__ == "__main__":
    import uvicorn
    port = 8080
    logger.info(f"Blogger Service starting on http://0.0.0.0:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
