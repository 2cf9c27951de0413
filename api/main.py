#!/usr/bin/env python3
"""
FastAPI Web Service for the Design Critique Assistant

This module provides REST API endpoints for design critique, learning
progress metrics and learner feedback.
"""

import os
import time
import uuid
import logging
from datetime import datetime
from typing import List, Dict, Optional, Any

import uvicorn
import torch
from fastapi import FastAPI, File, Form, UploadFile, HTTPException, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from analysis import (
    DesignCritic,
    FeedbackAnalyzer,
    HistoryStore,
    InvalidInput,
    ModelUnavailable,
    PersistenceError,
    ProgressEntry,
    ProgressTracker
)
from storage import SqlHistoryStore
from preprocessing import ImagePreprocessor, create_preprocessing_pipeline
from utils.validation_api import (
    validate_image_format,
    validate_content_type,
    validate_file_size,
    validate_user_id,
    validate_feedback,
    sanitize_filename,
    MAX_FILE_SIZE
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# API Configuration
API_VERSION = "1.0.0"
API_TITLE = "Design Critique Assistant API"
API_DESCRIPTION = """
Automated critique of graphic-design images with learning progress tracking.

## Features

- **Design Critique**: Upload a design and receive composition, color and technique scores
- **Learning Level**: Beginner, intermediate or advanced classification of the overall score
- **Recommendations**: Prioritized, templated suggestions for weak areas
- **Progress Tracking**: Averages, strongest and weakest areas, trend and skill levels over time
- **Feedback**: Sentiment scoring and tagging of learner feedback
"""

DATABASE_URL = os.getenv("DESIGN_CRITIQUE_DATABASE_URL", "sqlite:///design_critique.db")
API_TOKEN = os.getenv("DESIGN_CRITIQUE_API_TOKEN", "demo-token")
MODEL_WEIGHTS = os.getenv("DESIGN_CRITIQUE_MODEL_WEIGHTS")
MODEL_BACKBONE = os.getenv("DESIGN_CRITIQUE_BACKBONE", "resnet50")

# Pydantic Models
class CategoryResponse(BaseModel):
    """Score, findings and suggestions for one category"""
    score: float = Field(..., description="Category score (0-1)")
    findings: List[str] = Field(default_factory=list, description="Notably strong or weak sub-metrics")
    suggestions: List[str] = Field(default_factory=list, description="Practice suggestions")
    metrics: Dict[str, float] = Field(default_factory=dict, description="Raw sub-metric values")

class OverallResponse(BaseModel):
    score: float = Field(..., description="Weighted overall score (0-1)")
    summary: str = Field(..., description="Short textual summary")
    improvements: List[str] = Field(default_factory=list, description="Suggestions from weak categories")

class RecommendationResponse(BaseModel):
    area: str
    suggestion: str
    priority: str = Field(..., description="high, medium or low")

class AnalysisResponse(BaseModel):
    """Response model for design critique"""
    request_id: str = Field(..., description="Unique request identifier")
    composition: CategoryResponse
    color: CategoryResponse
    technique: CategoryResponse
    overall: OverallResponse
    level: str = Field(..., description="Learning level: beginner, intermediate, advanced")
    recommendations: List[RecommendationResponse] = Field(..., description="Prioritized recommendations")
    processing_time: float = Field(..., description="Processing time in seconds")
    timestamp: str = Field(..., description="Analysis timestamp")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Response metadata")

class TrendPointResponse(BaseModel):
    date: str
    score: float
    category: str

class LearningMetricsResponse(BaseModel):
    """Learning metrics recomputed from the full history"""
    user_id: str
    completed_resources: int
    total_resources: int
    average_score: float
    strongest_areas: List[str]
    areas_for_improvement: List[str]
    learning_trend: List[TrendPointResponse]
    recent_feedback: List[Dict[str, Any]]
    skill_levels: Dict[str, float]
    recommendations: List[RecommendationResponse]

class ProgressEntryResponse(BaseModel):
    timestamp: str
    resource_id: str
    completion_status: str
    overall_score: Optional[float] = None
    category_scores: Optional[Dict[str, float]] = None
    typography: Optional[float] = None
    feedback: Optional[Dict[str, Any]] = None

class LearningContext(BaseModel):
    difficulty: Optional[str] = Field(default=None, description="too_easy, appropriate or too_difficult")
    time_spent: Optional[float] = Field(default=None, description="Time spent in minutes")
    comprehension: float = Field(default=0.5, description="Self-reported comprehension (0-1)")
    technical_issues: Optional[List[str]] = None

class FeedbackRequest(BaseModel):
    """Learner feedback for a resource"""
    user_id: str
    resource_id: str
    rating: float = Field(..., description="Rating from 1 to 5")
    comments: Optional[str] = None
    strengths: Optional[List[str]] = None
    improvements: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    learning_context: Optional[LearningContext] = None
    category_scores: Optional[Dict[str, float]] = Field(default=None, description="Scores of the analysed design")
    completion_status: str = Field(default="completed", description="not_started, in_progress or completed")

class FeedbackResponse(BaseModel):
    user_id: str
    resource_id: str
    sentiment: str
    sentiment_score: float
    tags: List[str]
    strengths: List[str]
    improvements: List[str]

class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    uptime: float = Field(..., description="Service uptime in seconds")
    gpu_available: bool = Field(..., description="GPU availability")
    models_loaded: bool = Field(..., description="Models loading status")

# Initialize FastAPI app
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

service_start_time = time.time()
security = HTTPBearer()
progress_tracker = ProgressTracker()

@app.on_event("startup")
async def startup_event():
    """Initialize the history store, model backend and critic on startup"""

    # Imported here so the API module can be loaded without building the model
    from models import TorchModelBackend

    logger.info("Starting Design Critique Assistant API...")

    try:
        store = SqlHistoryStore(DATABASE_URL)
        logger.info("✓ History store initialized")

        preprocessor = create_preprocessing_pipeline({'target_size': (224, 224)})

        app.state.history_store = store
        app.state.preprocessor = preprocessor
        app.state.feedback_analyzer = FeedbackAnalyzer()

    except Exception as e:
        logger.error(f"Startup failed: {str(e)}")
        raise

    device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')
    logger.info(f"Using device: {device}")

    try:
        backend = TorchModelBackend(
            preprocessor=preprocessor,
            device=device,
            weights_path=MODEL_WEIGHTS,
            backbone=MODEL_BACKBONE
        )
        logger.info("✓ Model backend initialized")

    except ModelUnavailable as e:
        # Progress and feedback endpoints keep working without the model
        logger.error(f"Model backend unavailable, critique disabled: {str(e)}")
        return

    app.state.design_critic = DesignCritic(backend=backend, store=store)

    logger.info("API startup completed successfully!")

def get_critic(request: Request) -> DesignCritic:
    critic = getattr(request.app.state, 'design_critic', None)
    if critic is None:
        raise ModelUnavailable("Design critic is not initialized")
    return critic

def get_history_store(request: Request) -> HistoryStore:
    store = getattr(request.app.state, 'history_store', None)
    if store is None:
        raise PersistenceError("History store is not initialized")
    return store

def get_preprocessor(request: Request) -> ImagePreprocessor:
    preprocessor = getattr(request.app.state, 'preprocessor', None)
    return preprocessor or create_preprocessing_pipeline()

def get_feedback_analyzer(request: Request) -> FeedbackAnalyzer:
    analyzer = getattr(request.app.state, 'feedback_analyzer', None)
    return analyzer or FeedbackAnalyzer()

def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Bearer token check against the configured API token"""
    if credentials.credentials != API_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    return credentials.credentials

@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content={"detail": str(exc), "errors": exc.errors})

@app.exception_handler(ModelUnavailable)
async def model_unavailable_handler(request: Request, exc: ModelUnavailable):
    logger.error(f"Model unavailable: {str(exc)}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})

@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure: {str(exc)}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

def _check_user_id(user_id: Optional[str]):
    if user_id is not None and not validate_user_id(user_id):
        raise InvalidInput(f"Invalid user id: {user_id!r}")

@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Service health check endpoint"""
    critic = getattr(request.app.state, 'design_critic', None)
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        uptime=time.time() - service_start_time,
        gpu_available=torch.cuda.is_available(),
        models_loaded=critic is not None and critic.backend.is_loaded
    )

@app.post("/analyze", response_model=AnalysisResponse)
async def analyze_design(
    file: UploadFile = File(..., description="Design image to critique"),
    user_id: Optional[str] = Form(default=None),
    resource_id: Optional[str] = Form(default=None),
    critic: DesignCritic = Depends(get_critic),
    preprocessor: ImagePreprocessor = Depends(get_preprocessor),
    token: str = Depends(verify_token)
):
    """
    Critique a single design

    Upload an image and receive:
    - Composition, color and technique scores with findings and suggestions
    - Weighted overall score and learning level
    - Prioritized recommendations

    When ``user_id`` is given the result is added to the user's progress history.
    """
    request_id = str(uuid.uuid4())
    start_time = time.time()

    _check_user_id(user_id)

    if not validate_image_format(file.filename) or not validate_content_type(file.content_type):
        raise InvalidInput("Only JPG, PNG and GIF images are supported")

    data = await file.read()
    if not validate_file_size(len(data)):
        raise InvalidInput(f"File must be non-empty and at most {MAX_FILE_SIZE // (1024 * 1024)}MB")

    logger.info(f"Starting critique for request {request_id}")

    image = await run_in_threadpool(preprocessor.decode_image, data)
    results = await run_in_threadpool(critic.analyze, image, user_id, resource_id)

    processing_time = time.time() - start_time
    payload = results.to_dict()

    response = AnalysisResponse(
        request_id=request_id,
        composition=CategoryResponse(**_category_payload(payload['composition'])),
        color=CategoryResponse(**_category_payload(payload['color'])),
        technique=CategoryResponse(**_category_payload(payload['technique'])),
        overall=OverallResponse(**payload['overall']),
        level=payload['level'],
        recommendations=[RecommendationResponse(**r) for r in payload['recommendations']],
        processing_time=processing_time,
        timestamp=datetime.now().isoformat(),
        metadata={
            "image_shape": list(image.shape),
            "original_filename": sanitize_filename(file.filename),
            "user_id": user_id,
            "resource_id": resource_id
        }
    )

    logger.info(f"Critique completed for {request_id} in {processing_time:.3f}s - Score: {results.overall.score:.3f}")
    return response

def _category_payload(category: Dict[str, Any]) -> Dict[str, Any]:
    return {key: category[key] for key in ('score', 'findings', 'suggestions', 'metrics')}

@app.get("/users/{user_id}/metrics", response_model=LearningMetricsResponse)
async def get_learning_metrics(
    user_id: str,
    store: HistoryStore = Depends(get_history_store),
    token: str = Depends(verify_token)
):
    """Recompute learning metrics from the user's full history"""
    _check_user_id(user_id)

    history = await run_in_threadpool(store.read, user_id)
    metrics = progress_tracker.compute_metrics(history)
    return LearningMetricsResponse(user_id=user_id, **metrics.to_dict())

@app.get("/users/{user_id}/history", response_model=List[ProgressEntryResponse])
async def get_history(
    user_id: str,
    store: HistoryStore = Depends(get_history_store),
    token: str = Depends(verify_token)
):
    _check_user_id(user_id)

    entries = await run_in_threadpool(store.read, user_id)
    return [ProgressEntryResponse(**entry.to_dict()) for entry in entries]

@app.post("/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    feedback: FeedbackRequest,
    store: HistoryStore = Depends(get_history_store),
    analyzer: FeedbackAnalyzer = Depends(get_feedback_analyzer),
    token: str = Depends(verify_token)
):
    """
    Submit learner feedback for a resource

    The feedback is scored, tagged and appended to the user's progress history.
    """
    _check_user_id(feedback.user_id)

    submission = feedback.model_dump(exclude_none=True)
    is_valid, errors = validate_feedback(submission)
    if not is_valid:
        raise InvalidInput("Invalid feedback", errors)

    enriched = analyzer.enrich(submission, feedback.category_scores)

    entry = ProgressEntry(
        timestamp=datetime.now(),
        resource_id=feedback.resource_id,
        completion_status=feedback.completion_status,
        feedback={
            'rating': feedback.rating,
            'comments': feedback.comments,
            'strengths': enriched.get('strengths', []),
            'improvements': enriched.get('improvements', []),
            'sentiment': enriched['sentiment']
        }
    )
    await run_in_threadpool(store.append, feedback.user_id, entry)

    logger.info(f"Feedback stored for {feedback.user_id}/{feedback.resource_id}: {enriched['sentiment']}")

    return FeedbackResponse(
        user_id=feedback.user_id,
        resource_id=feedback.resource_id,
        sentiment=enriched['sentiment'],
        sentiment_score=enriched['sentiment_score'],
        tags=enriched['tags'],
        strengths=enriched.get('strengths', []),
        improvements=enriched.get('improvements', [])
    )

if __name__ == "__main__":
    # Run with uvicorn for development
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
