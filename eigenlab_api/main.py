"""
FastAPI application for Eigen Explorer.

Serves:
- The calculator page (server-rendered HTML with form posts)
- A JSON API for decompositions, derivations and preset examples
"""

from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from eigenlab import CalculatorSession, Derivation

from .core import (
    settings,
    setup_logging,
    get_logger,
    register_error_handlers,
)
from .models import (
    MatrixRequest,
    EigenResponse,
    ExampleResponse,
    ScalarResponse,
    SessionResponse,
)
from .repositories import get_session_repository
from .services import EigenService, SessionService, get_eigen_service, get_session_service
from .views import render_page

# Setup logging
setup_logging()
logger = get_logger(__name__)


# Lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info(
        "Starting Eigen Explorer",
        extra_data={
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG
        }
    )
    yield
    logger.info("Shutting down Eigen Explorer")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Eigenvalues and eigenvectors of small square matrices, with a step-by-step derivation",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

# Register error handlers
register_error_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# Dependency injection
def get_session_service_dep() -> SessionService:
    """Get session service instance"""
    repository = get_session_repository()
    return get_session_service(repository)


def get_eigen_service_dep() -> EigenService:
    """Get eigen service instance"""
    return get_eigen_service()


async def get_current_session(
    request: Request,
    service: SessionService = Depends(get_session_service_dep)
) -> CalculatorSession:
    """Session named by the cookie, or a new one"""
    return await service.get_or_create(request.cookies.get(settings.SESSION_COOKIE_NAME))


def _remember(response: Response, session: CalculatorSession) -> Response:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        str(session.session_id),
        httponly=True,
        samesite="lax"
    )
    return response


def _back_to_page(session: CalculatorSession) -> Response:
    """Post/redirect/get back to the calculator page"""
    return _remember(RedirectResponse("/", status_code=303), session)


# Calculator page

@app.get("/", response_class=HTMLResponse)
async def calculator_page(session: CalculatorSession = Depends(get_current_session)):
    """Render the calculator page"""
    html = render_page(session, title=settings.APP_NAME, decimals=settings.RESULT_DECIMALS)
    return _remember(HTMLResponse(html), session)


@app.post("/size")
async def change_size(
    size: int = Form(...),
    session: CalculatorSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service_dep)
):
    """Switch to a fresh zero matrix of another size"""
    await service.resize(session, size)
    return _back_to_page(session)


@app.post("/cells")
async def save_cells(
    request: Request,
    session: CalculatorSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service_dep)
):
    """Store the submitted cell values"""
    form = await request.form()
    await service.update_cells(session, form)
    return _back_to_page(session)


@app.post("/calculate")
async def calculate(
    request: Request,
    session: CalculatorSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service_dep)
):
    """Store the submitted cell values and calculate"""
    form = await request.form()
    await service.update_cells(session, form)
    await service.calculate(session)
    return _back_to_page(session)


@app.post("/reset")
async def reset(
    session: CalculatorSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service_dep)
):
    """Clear the matrix"""
    await service.reset(session)
    return _back_to_page(session)


@app.post("/example")
async def load_example(
    session: CalculatorSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service_dep)
):
    """Load the preset example for the current size"""
    await service.load_example(session)
    return _back_to_page(session)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


# JSON API

api = APIRouter(prefix=settings.API_PREFIX)


@api.get("/")
async def read_root():
    """API root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "eigen": f"{settings.API_PREFIX}/eigen",
            "polynomial": f"{settings.API_PREFIX}/polynomial",
            "examples": f"{settings.API_PREFIX}/examples/{{size}}",
            "session": f"{settings.API_PREFIX}/session",
            "health": "/health"
        }
    }


@api.post("/eigen", response_model=EigenResponse)
async def decompose(
    request: MatrixRequest,
    service: EigenService = Depends(get_eigen_service_dep)
):
    """
    Decompose a matrix.

    Args:
        request: Matrix rows (2x2 to 4x4)

    Returns:
        Eigenvalues, eigenvectors, verification and the characteristic polynomial
    """
    matrix = service.parse_matrix(request.matrix)
    result, report, derivation = await service.decompose(matrix)

    return EigenResponse.from_domain(
        result,
        report,
        derivation.polynomial,
        decimals=settings.RESULT_DECIMALS
    )


@api.post("/polynomial", response_model=Derivation)
async def polynomial(
    request: MatrixRequest,
    service: EigenService = Depends(get_eigen_service_dep)
):
    """Characteristic polynomial derivation without solving"""
    matrix = service.parse_matrix(request.matrix)

    logger.info(
        "Deriving characteristic polynomial",
        extra_data={"size": matrix.size}
    )

    return await service.derive(matrix)


@api.get("/examples/{size}", response_model=ExampleResponse)
async def get_example(
    size: int,
    service: EigenService = Depends(get_eigen_service_dep)
):
    """Preset example matrix for a size"""
    return ExampleResponse.from_domain(service.example(size))


@api.get("/session", response_model=SessionResponse)
async def get_session_state(
    response: Response,
    session: CalculatorSession = Depends(get_current_session)
):
    """State of the caller's calculator session"""
    _remember(response, session)

    eigenvalues: List[ScalarResponse] = []
    if session.result is not None:
        eigenvalues = [
            ScalarResponse.from_domain(v, settings.RESULT_DECIMALS)
            for v in session.result.eigenvalues
        ]

    return SessionResponse(
        session_id=session.session_id,
        size=session.size,
        state=session.state.value,
        matrix=session.matrix.to_python(),
        error=session.error,
        eigenvalues=eigenvalues
    )


app.include_router(api)


def run() -> None:
    """Run the development server"""
    import uvicorn

    uvicorn.run(
        "eigenlab_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
