import os, sys
import warnings
from pathlib import Path

# Add src/ to sys.path so the suite runs from a plain checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for league_bot.config
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("API_BASE_URL", "http://localhost:3000")
os.environ.setdefault("BOT_API_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "test")

# Silence deprecation warnings surfaced from third-party dependencies during tests
warnings.filterwarnings(
    "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
)
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


def pytest_configure(config):
    warnings.filterwarnings(
        "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
    )
    warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)
