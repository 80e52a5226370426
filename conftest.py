"""Global pytest configuration."""

import os

# Test environment is set before any application import reads Settings
os.environ["DATABASE_URL"] = ""
os.environ["REDIS_URL"] = ""
os.environ["GENERATION_API_KEY"] = ""
os.environ.setdefault("SEED_DEV_DATA", "true")
os.environ.setdefault("RESPONSE_LANGUAGE", "en")
