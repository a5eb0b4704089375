"""
Configuration module using pydantic-settings for environment variable validation.
"""
from typing import Dict, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="stylematch", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="logs", description="Directory for rotated log files")

    # API Settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Qdrant Settings
    qdrant_host: str = Field(default="localhost", description="Qdrant host")
    qdrant_port: int = Field(default=6333, description="Qdrant HTTP port")
    qdrant_location: Optional[str] = Field(
        default=None,
        description="Local Qdrant location (':memory:' or a path); overrides host/port"
    )
    qdrant_collection_name: str = Field(
        default="service_media",
        description="Qdrant collection name"
    )
    qdrant_timeout: int = Field(default=5, description="Qdrant client request timeout in seconds")

    # Embedding Settings
    embedding_dimension: int = Field(
        default=1408,
        description="Dimension of the primary (hybrid) query embedding"
    )
    facet_vector_sizes: Dict[str, int] = Field(
        default={
            "hybrid": 1408,
            "visual": 1408,
            "style": 1408,
            "semantic": 512,
            "color": 512,
        },
        description="Stored vector size per embedding facet"
    )

    @field_validator("facet_vector_sizes")
    @classmethod
    def validate_facet_vector_sizes(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Validate that the hybrid facet is present and sizes are positive."""
        if "hybrid" not in v:
            raise ValueError("facet_vector_sizes must define the 'hybrid' facet")
        if any(size <= 0 for size in v.values()):
            raise ValueError("facet vector sizes must be positive")
        return v

    # Search Settings
    default_search_limit: int = Field(default=20, description="Default search results limit")
    max_search_limit: int = Field(default=50, description="Maximum search results limit")
    candidate_pool_factor: int = Field(
        default=2,
        description="How many candidates to retrieve per requested result"
    )
    retrieval_timeout: float = Field(
        default=5.0,
        description="Upper bound in seconds for one vector store query"
    )

    @field_validator("candidate_pool_factor")
    @classmethod
    def validate_candidate_pool_factor(cls, v: int) -> int:
        if v < 1:
            raise ValueError("candidate_pool_factor must be at least 1")
        return v

    # Scoring Settings
    score_max_distance: float = Field(
        default=1.0,
        description="Cosine distance that maps to a match score of 0"
    )
    score_calibration: str = Field(
        default="linear",
        description="Distance to score calibration (linear/perceptual)"
    )
    min_match_score: int = Field(
        default=40,
        description="Matches scoring below this are not returned"
    )

    @field_validator("score_max_distance")
    @classmethod
    def validate_score_max_distance(cls, v: float) -> float:
        """Validate max distance lies within the cosine distance range."""
        if not 0 < v <= 2:
            raise ValueError("score_max_distance must be in (0, 2]")
        return v

    @field_validator("score_calibration")
    @classmethod
    def validate_score_calibration(cls, v: str) -> str:
        if v not in ["linear", "perceptual"]:
            raise ValueError("score_calibration must be 'linear' or 'perceptual'")
        return v

    @field_validator("min_match_score")
    @classmethod
    def validate_min_match_score(cls, v: int) -> int:
        """Validate minimum score is between 0 and 100."""
        if not 0 <= v <= 100:
            raise ValueError("min_match_score must be between 0 and 100")
        return v

    # Re-ranking Settings
    diversify_results: bool = Field(default=True, description="Spread top results across providers")
    diversity_provider_cap: int = Field(
        default=2,
        description="Maximum results per provider inside the diversity window"
    )
    diversity_window: int = Field(
        default=10,
        description="Number of top ranked slots the provider cap applies to"
    )

    @field_validator("diversity_provider_cap")
    @classmethod
    def validate_diversity_provider_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError("diversity_provider_cap must be at least 1")
        return v

    # Retry Settings
    max_retries: int = Field(default=3, description="Maximum number of retries")
    retry_delay: int = Field(default=1, description="Initial retry delay in seconds")
    retry_backoff: int = Field(default=2, description="Retry backoff multiplier")


# Global settings instance
settings = Settings()
