from fastapi import APIRouter

# landing page, the back office itself lives under /api
DefaultRouter = APIRouter()


@DefaultRouter.get("/")
async def landing():
    return {"service": "Kurasyit", "api": "/api", "docs": "/docs"}
