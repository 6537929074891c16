# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MongoConfig (dataclass)
#     uri: str | None        (default None, overrides host/port when set)
#     host: str              (default "localhost")
#     port: int              (default 27017)
#     user: str | None       (default None)
#     password: str | None   (default None)
#     database: str          (default "development", the deployment environment)
#     configuration_collection: str (default "configurations")
#     analysis_collection: str      (default "analysis")
#
# - AnalysisConfig (dataclass)
#     recompute_on_fetch: bool (default False)
#
# - AppConfig (dataclass)
#     mongo: MongoConfig
#     analysis: AnalysisConfig
#     data_stream_url: str       (default "http://127.0.0.1:8000/GET/record")
#     log_level: str             (default "INFO")
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# USAGE:
# ------
#   from record_analysis.config import get_config
#   config = get_config()
#   print(config.mongo.database)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


TRUE_VARIANTS = {"1", "true", "yes", "on"}


@dataclass
class MongoConfig:
    """MongoDB database configuration."""
    uri: Optional[str] = None
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "development"
    configuration_collection: str = "configurations"
    analysis_collection: str = "analysis"


@dataclass
class AnalysisConfig:
    """Statistics behaviour."""
    recompute_on_fetch: bool = False


@dataclass
class AppConfig:
    """Main application configuration."""
    mongo: MongoConfig = field(default_factory=MongoConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    data_stream_url: str = "http://127.0.0.1:8000/GET/record"
    log_level: str = "INFO"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUE_VARIANTS


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    # Build MongoDB configuration
    mongo_config = MongoConfig(
        uri=os.getenv("MONGO_URI") or None,
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("DEPLOYMENT_ENVIRONMENT", "development"),
        configuration_collection=os.getenv("CONFIGURATION_COLLECTION", "configurations"),
        analysis_collection=os.getenv("ANALYSIS_COLLECTION", "analysis")
    )

    analysis_config = AnalysisConfig(
        recompute_on_fetch=_env_flag("ANALYSIS_RECOMPUTE_ON_FETCH")
    )

    # Build main application configuration
    _config_instance = AppConfig(
        mongo=mongo_config,
        analysis=analysis_config,
        data_stream_url=os.getenv("DATA_STREAM_URL", "http://127.0.0.1:8000/GET/record"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper()
    )

    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
