from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

from models.entities import FeedbackType

ConfidenceTier = Literal["high", "medium", "low"]


class SubScores(BaseModel):
    skills_match: float = 0.0
    experience_match: float = 0.0
    education_match: float = 0.0
    location_match: float = 0.0
    salary_match: float = 0.0
    company_match: float = 0.0
    industry_match: float = 0.0
    culture_fit: float = 0.0


class FeedbackEntry(BaseModel):
    feedback: FeedbackType
    reasons: list[str] = []
    recorded_at: datetime


class ScoredRecommendation(BaseModel):
    id: str
    profile_id: str
    job_id: str
    job_title: str = ""
    company_name: str = ""
    industry: str = ""
    overall_score: float = 0.0  # 0-1
    match_percentage: int = 0  # 0-100
    scores: SubScores = SubScores()
    learned_score: float | None = None  # None when no trained model was available
    reasons: list[str] = []
    concerns: list[str] = []
    insights: list[str] = []
    confidence: ConfidenceTier = "low"
    feedback_history: list[FeedbackEntry] = []
    created_at: datetime
    updated_at: datetime


class TrainingMetrics(BaseModel):
    accuracy: float = 0.0
    loss: float = 0.0
    validation_accuracy: float = 0.0
    validation_loss: float = 0.0
    training_time: float = 0.0  # seconds
    data_points: int = 0
    epochs: int = 0
    model_version: str = ""
    feature_size: int = 0
    synthetic_points: int = 0


class ModelEvaluation(BaseModel):
    accuracy: float = 0.0
    rmse: float = 0.0
    spearman: float = 0.0
    samples: int = 0


class TrendPoint(BaseModel):
    day: date
    count: int = 0
    average_score: float = 0.0


class EngagementSummary(BaseModel):
    viewed: int = 0
    applied: int = 0
    saved: int = 0
    rejected: int = 0
    liked: int = 0
    disliked: int = 0


class RecommendationAnalytics(BaseModel):
    total_recommendations: int = 0
    average_score: float = 0.0
    top_skills: list[str] = []
    top_companies: list[str] = []
    top_industries: list[str] = []
    trends: list[TrendPoint] = []
    engagement: EngagementSummary = EngagementSummary()
