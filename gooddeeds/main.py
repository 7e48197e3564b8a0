from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from .chat import routers as chat_router
from .friendship import routers as friend_router

from .core.config import CORS_ORIGINS
from .core.dependencies import UserContext, verify_token
from .core.middleware import logging_middleware
from .core.supabase_client import close_supabase
from .utils.logging_config import setup_logging


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_supabase()


app = FastAPI(title="GoodDeeds Chat", lifespan=lifespan)
app.include_router(friend_router.router, prefix="/friends", tags=["Friendship"])
app.include_router(chat_router.router, prefix="/chat", tags=["Chat"])

app.middleware("http")(logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/me")
def whoami(user: UserContext = Depends(verify_token)):
    return {"user_id": user.user_id, "email": user.email}
