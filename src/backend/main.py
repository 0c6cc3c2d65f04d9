"""
FastAPI应用入口
"""
from dotenv import load_dotenv
from pathlib import Path
import os
import logging

# 加载环境变量 - 优先从根目录加载，回退到当前目录
root_env = Path(__file__).parent.parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)
else:
    load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from radcase import __version__
from radcase.api import cases, progress, quiz, review, users
from radcase.models import init_db


def _get_cors_config() -> tuple[list[str], str | None]:
    """
    获取 CORS 配置

    Returns:
        (allow_origins, allow_origin_regex)
        - 生产环境：使用精确匹配的 origins 列表
        - 开发环境：使用正则匹配本地端口，方便本地开发
    """
    origins_str = os.getenv("ALLOWED_ORIGINS", "")
    if origins_str:
        origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]
        if origins:
            return origins, None

    # 开发环境：使用正则匹配所有本地端口
    if os.getenv("DEV_MODE", "false").lower() == "true":
        return [], r"http://(localhost|127\.0\.0\.1)(:\d+)?"

    # 非开发环境且未配置 ALLOWED_ORIGINS：拒绝所有跨域
    logger.warning("未配置 ALLOWED_ORIGINS 且非开发模式，CORS 将拒绝所有跨域请求")
    return [], None


@asynccontextmanager
async def _lifespan(_: FastAPI):
    # 启动时确保数据表存在
    if os.getenv("AUTO_INIT_DB", "true").lower() == "true":
        init_db()
    yield


app = FastAPI(
    title="RadCase API",
    description="Radiology teaching cases - Quiz and Spaced Repetition Review",
    version=__version__,
    lifespan=_lifespan
)

# CORS配置 - 从环境变量读取允许的源
allow_origins, allow_origin_regex = _get_cors_config()
logger.info(f"CORS 配置: origins={allow_origins}, regex={allow_origin_regex}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 包含所有路由
app.include_router(users.router, prefix="/api", tags=["学员管理"])
app.include_router(cases.router, prefix="/api", tags=["病例管理"])
app.include_router(quiz.router, prefix="/api", tags=["病例答题"])
app.include_router(review.router, prefix="/api", tags=["复习调度"])
app.include_router(progress.router, prefix="/api", tags=["学习进度"])


@app.get("/")
async def root():
    """根路径"""
    return {"message": "RadCase API", "docs": "/docs"}


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
