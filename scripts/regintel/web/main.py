"""
FastAPI application for the regulatory intelligence service.
"""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from regintel import __version__
from regintel.web.lifespan import lifespan

# Load .env before anything else
load_dotenv()

app = FastAPI(
    title="Regulatory Intelligence",
    description="Medical device regulatory updates, legal cases and knowledge base",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    return RedirectResponse(url="/docs", status_code=302)


# Import and register routes
from regintel.web.health import router as health_router  # noqa: E402
from regintel.web.routes import collection, dashboard, historical, knowledge, legal, updates  # noqa: E402

app.include_router(health_router)
app.include_router(updates.router)
app.include_router(legal.router)
app.include_router(knowledge.router)
app.include_router(historical.router)
app.include_router(collection.router)
app.include_router(dashboard.router)
