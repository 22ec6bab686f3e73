"""
Configuration settings for the scheduling and 4D simulation engine.
Load configuration from environment variables or a .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', '')

    # ============================================================================
    # Playback
    # ============================================================================
    DEFAULT_SPEED = float(os.getenv('BIM4D_DEFAULT_SPEED', '1.0'))   # simulated days per second
    MIN_SPEED = float(os.getenv('BIM4D_MIN_SPEED', '0.5'))
    MAX_SPEED = float(os.getenv('BIM4D_MAX_SPEED', '10'))
    SKIP_DAYS = float(os.getenv('BIM4D_SKIP_DAYS', '7'))

    # ============================================================================
    # Critical path analysis
    # ============================================================================
    DEFAULT_DURATION_DAYS = float(os.getenv('BIM4D_DEFAULT_DURATION_DAYS', '1.0'))
    NEAR_CRITICAL_DAYS = float(os.getenv('BIM4D_NEAR_CRITICAL_DAYS', '5'))

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate that settings are consistent.
        Returns list of problems found.
        """
        problems = []

        if cls.MIN_SPEED <= 0:
            problems.append('BIM4D_MIN_SPEED must be positive')
        if cls.MIN_SPEED > cls.MAX_SPEED:
            problems.append('BIM4D_MIN_SPEED must not exceed BIM4D_MAX_SPEED')
        if not cls.MIN_SPEED <= cls.DEFAULT_SPEED <= cls.MAX_SPEED:
            problems.append('BIM4D_DEFAULT_SPEED must lie within [BIM4D_MIN_SPEED, BIM4D_MAX_SPEED]')
        if cls.DEFAULT_DURATION_DAYS < 0:
            problems.append('BIM4D_DEFAULT_DURATION_DAYS must not be negative')

        return problems


# Create settings instance
settings = Settings()
