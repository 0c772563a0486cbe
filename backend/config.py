from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    debug: bool = False

    # Recommendation engine
    cache_ttl_seconds: int = 3600
    cache_sweep_interval_seconds: int = 300
    cache_max_entries: int = 10000
    analytics_cache_ttl_seconds: int = 3600
    max_candidates: int = 50  # candidate pool cap per request
    min_relevance_score: float = 0.3
    similarity_threshold: float = 0.8
    learned_score_weight: float = 0.3  # share of the learned signal in the blend
    similar_jobs_limit: int = 5

    # Training pipeline
    model_dir: str = "training/models/engagement"  # versioned model artifacts
    report_dir: str = "training/reports"
    min_training_records: int = 10
    synthetic_sample_count: int = 50

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "ENGINE_",
        "protected_namespaces": ("settings_",),
    }


settings = Settings()
