import os

os.environ.setdefault("GEMINI_API_KEY", "test-key")
