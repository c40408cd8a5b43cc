# prompt_studio_service/app/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, List, Optional, TypeVar

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .utils.logging_config import setup_logging

setup_logging()

from .config import settings
from .models import (
    AnalysisResponse,
    AnalyzeRequest,
    CinematicElementsRequest,
    CinematicElementsResponse,
    GeneratedPrompt,
    MagicStoryRequest,
    MagicStoryResponse,
    OptimizationResponse,
    OptimizeRequest,
    PromptPreset,
    PromptRequest,
    RefineRequest,
    RefineResponse,
    StoryVariationsRequest,
    StoryVariationsResponse,
    SuggestionsRequest,
    SuggestionsResponse,
)
from .services import local_fallbacks, story_library
from .services.generative_adapter import GenerativeServiceAdapter, GenerativeServiceError
from .services.request_gate import InMemoryGateStore, RateLimitExceeded, RequestGate
from .services.templates import PRESETS, render_story_prompt
from .vertex_ai_client import genai_credentials_available, get_genai_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SUGGESTION_INPUT_LENGTH = 2

_generative_adapter: GenerativeServiceAdapter | None = None  # Initialized in lifespan
_request_gate = RequestGate(InMemoryGateStore())


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _generative_adapter
    logger.info("Prompt Studio Service starting up...")
    if genai_credentials_available():
        try:
            _generative_adapter = GenerativeServiceAdapter(get_genai_client())
            logger.info("Generative service adapter initialized successfully on startup.")
        except Exception as e:
            logger.critical(
                f"Failed to initialize GenAI client on startup: {e}. AI endpoints will answer in degraded mode.",
                exc_info=True,
            )
    else:
        logger.warning(
            "No generative service credentials configured. AI endpoints will answer in degraded mode."
        )
    yield
    logger.info("Prompt Studio Service shutting down...")


app = FastAPI(
    title="Prompt Studio Service",
    description="Assembles video-generation prompts for Veo 3, Flow, RunwayML and Pika, with optional AI assistance.",
    version="0.3.0",
    lifespan=lifespan,
)


# --- Dependencies ---
def get_request_gate() -> RequestGate:
    return _request_gate


def get_generative_adapter() -> Optional[GenerativeServiceAdapter]:
    return _generative_adapter


# --- Error handlers ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"API: Rejected invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid input", "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=http_status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": "Too many requests. Please slow down."},
        headers={"Retry-After": str(max(1, round(exc.retry_after)))},
    )


async def _call_adapter(
    operation: str,
    adapter: Optional[GenerativeServiceAdapter],
    call: Callable[[GenerativeServiceAdapter], Awaitable[T]],
) -> Optional[T]:
    """Runs one adapter call with a deadline. None means: answer from the local fallback."""
    if adapter is None:
        logger.warning(f"API: {operation} requested but the generative service is not configured.")
        return None
    try:
        return await asyncio.wait_for(call(adapter), timeout=settings.ROUTE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(
            f"API: {operation} timed out after {settings.ROUTE_TIMEOUT_SECONDS}s. Using fallback."
        )
    except GenerativeServiceError as e:
        logger.error(f"API: {operation} failed: {e}. Using fallback.", exc_info=True)
    return None


def _unexpected_error(operation: str, e: Exception) -> HTTPException:
    logger.error(f"API: Unexpected error during {operation}: {e}", exc_info=True)
    return HTTPException(
        status_code=500,
        detail=f"An unexpected internal error occurred during {operation}.",
    )


# --- API Endpoints ---
@app.post("/api/prompt", response_model=GeneratedPrompt)
async def api_generate_prompt(
    request: Request,
    request_data: PromptRequest = Body(...),
    gate: RequestGate = Depends(get_request_gate),
):
    """
    Template-only render. Rate limited per client host and cached by the full normalized request.
    """
    caller = request.client.host if request.client else None
    generated = gate.handle(caller, request_data)
    logger.info(
        f"API: Prompt rendered for model '{request_data.model.value}'. Length: {len(generated.assembled_prompt)}"
    )
    return generated


@app.post(
    "/api/suggestions",
    response_model=SuggestionsResponse,
    response_model_exclude_none=True,
)
async def api_suggestions(
    request_data: Optional[SuggestionsRequest] = Body(None),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    partial_input = request_data.input if request_data else ""
    if len(partial_input) < MIN_SUGGESTION_INPUT_LENGTH:
        return SuggestionsResponse(suggestions=[])

    try:
        suggestions = await _call_adapter(
            "suggestions", adapter, lambda a: a.generate_suggestions(partial_input)
        )
    except Exception as e:
        raise _unexpected_error("suggestions", e)

    if suggestions is not None:
        logger.info(f"API: Generated {len(suggestions)} AI suggestions for input: '{partial_input}'")
        return SuggestionsResponse(suggestions=suggestions)
    return SuggestionsResponse(
        suggestions=local_fallbacks.fallback_suggestions(partial_input),
        note=local_fallbacks.SUGGESTIONS_NOTE,
    )


@app.post("/api/analyze", response_model=AnalysisResponse, response_model_exclude_none=True)
async def api_analyze(
    request_data: AnalyzeRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    try:
        analysis = await _call_adapter(
            "analysis", adapter, lambda a: a.analyze_prompt(request_data.prompt)
        )
    except Exception as e:
        raise _unexpected_error("analysis", e)

    if analysis is not None:
        logger.info(
            f"API: Analyzed prompt quality. Score: {analysis.score}, Feedback points: {len(analysis.feedback)}"
        )
        return AnalysisResponse(**analysis.model_dump())
    fallback = local_fallbacks.fallback_analysis(request_data.prompt)
    return AnalysisResponse(**fallback.model_dump(), note=local_fallbacks.ANALYSIS_NOTE)


@app.post("/api/refine", response_model=RefineResponse, response_model_exclude_none=True)
async def api_refine(
    request_data: RefineRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    model = request_data.model or "flow"
    try:
        refinements = await _call_adapter(
            "refinement", adapter, lambda a: a.refine_prompt(request_data.prompt, model)
        )
    except Exception as e:
        raise _unexpected_error("refinement", e)

    if refinements:
        refined_prompt = refinements[0]
        logger.info(
            f"API: Prompt refined. Original length: {len(request_data.prompt)}, Refined length: {len(refined_prompt)}"
        )
        return RefineResponse(refined_prompt=refined_prompt)
    return RefineResponse(
        refined_prompt=local_fallbacks.fallback_refinement(request_data.prompt),
        note=local_fallbacks.REFINE_NOTE,
    )


@app.post(
    "/api/optimize", response_model=OptimizationResponse, response_model_exclude_none=True
)
async def api_optimize(
    request_data: OptimizeRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    try:
        optimization = await _call_adapter(
            "optimization",
            adapter,
            lambda a: a.optimize_prompt(
                request_data.idea, request_data.model, request_data.current_prompt
            ),
        )
    except Exception as e:
        raise _unexpected_error("optimization", e)

    if optimization is not None:
        return OptimizationResponse(**optimization.model_dump())
    fallback = local_fallbacks.fallback_optimization(request_data.idea)
    return OptimizationResponse(**fallback.model_dump(), note=local_fallbacks.OPTIMIZE_NOTE)


@app.post(
    "/api/magic-story", response_model=MagicStoryResponse, response_model_exclude_none=True
)
async def api_magic_story(
    request_data: MagicStoryRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    """
    Expands a single word into a story and renders it into a prompt.
    Falls back to the offline story library when the generative service is unavailable.
    """
    try:
        story = await _call_adapter(
            "magic story",
            adapter,
            lambda a: a.expand_word_to_story(request_data.word, request_data.model),
        )
        note = None
        if story is None:
            story = story_library.expand(request_data.word, request_data.model)
            note = local_fallbacks.MAGIC_STORY_NOTE
        result = render_story_prompt(story, request_data.model)
    except Exception as e:
        raise _unexpected_error("magic story", e)

    logger.info(
        f"API: Magic story generated for word '{request_data.word}' ({request_data.model.value}). Degraded: {note is not None}"
    )
    return MagicStoryResponse(story=result.story, prompt=result.prompt, note=note)


@app.post(
    "/api/story-variations",
    response_model=StoryVariationsResponse,
    response_model_exclude_none=True,
)
async def api_story_variations(
    request_data: StoryVariationsRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    try:
        variations = await _call_adapter(
            "story variations",
            adapter,
            lambda a: a.generate_story_variations(request_data.story, request_data.model),
        )
    except Exception as e:
        raise _unexpected_error("story variations", e)

    if variations:
        return StoryVariationsResponse(variations=variations)
    return StoryVariationsResponse(
        variations=local_fallbacks.fallback_story_variations(request_data.story),
        note=local_fallbacks.VARIATIONS_NOTE,
    )


@app.post(
    "/api/cinematic-elements",
    response_model=CinematicElementsResponse,
    response_model_exclude_none=True,
)
async def api_cinematic_elements(
    request_data: CinematicElementsRequest = Body(...),
    adapter: Optional[GenerativeServiceAdapter] = Depends(get_generative_adapter),
):
    try:
        elements = await _call_adapter(
            "cinematic elements",
            adapter,
            lambda a: a.generate_cinematic_elements(
                request_data.story_context, request_data.model
            ),
        )
    except Exception as e:
        raise _unexpected_error("cinematic elements", e)

    if elements is not None:
        return CinematicElementsResponse(**elements.model_dump())
    fallback = local_fallbacks.fallback_cinematic_elements(request_data.model)
    return CinematicElementsResponse(
        **fallback.model_dump(), note=local_fallbacks.CINEMATIC_NOTE
    )


@app.get("/api/presets", response_model=List[PromptPreset])
async def api_presets():
    return PRESETS


@app.get("/")
async def read_root():
    return {"message": f"Welcome to the Prompt Studio Service (v{app.version})"}


@app.get("/health")
async def health_check():
    generative_ok = bool(_generative_adapter)
    if generative_ok:
        return {"status": "ok", "generative_service_initialized": True}
    return {
        "status": "degraded",
        "generative_service_initialized": False,
        "detail": "Generative service not configured; AI endpoints use local fallbacks.",
    }
