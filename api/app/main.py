from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.database import init_db
from app.routes import revenue, admin


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await init_db()
    yield


app = FastAPI(
    title='PremiumTime API',
    description='Revenue distribution backend for the PremiumTime engagement platform',
    version='0.1.0',
    lifespan=lifespan,
)

# CORS for the dashboard and extensions
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

# Routes
app.include_router(revenue.router, prefix='/api/revenue', tags=['revenue'])
app.include_router(admin.router, prefix='/api/admin/revenue', tags=['admin'])


@app.get('/health')
async def health_check():
    """Health check endpoint."""
    return {'status': 'ok', 'service': 'premiumtime-api'}
