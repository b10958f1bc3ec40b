import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


class Config:
    """Application configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///world_cup.db')

    # Application settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Seed data settings
    SEED_FILE = os.getenv('SEED_FILE', str(PACKAGE_DIR / 'data' / 'teams.json'))
    SEED_STRICT = os.getenv('SEED_STRICT', 'False').lower() == 'true'

    # Team settings
    DEFAULT_IMAGE_NAME = os.getenv('DEFAULT_IMAGE_NAME', 'wenderland-flag')

    # Logging settings
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'True').lower() == 'true'

    @classmethod
    def get_database_url(cls, database_url: str = None) -> str:
        """Get the database URL with the async sqlite driver"""
        url = database_url or cls.DATABASE_URL
        # Covers file URLs and the bare in-memory 'sqlite://'
        if url.startswith('sqlite://'):
            url = url.replace('sqlite://', 'sqlite+aiosqlite://', 1)
        return url

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if not cls.SEED_FILE:
            raise ValueError("SEED_FILE is required")
        if not cls.DEFAULT_IMAGE_NAME:
            raise ValueError("DEFAULT_IMAGE_NAME must not be empty")
