"""Settings for the question generation service, overridable from the environment."""

import os

LLM_URL: str = os.environ.get("QUIZ_PROCTOR_LLM_URL", "http://localhost:11434")
LLM_MODEL_NAME: str = os.environ.get("QUIZ_PROCTOR_LLM_MODEL", "mistral:7b")
LLM_TIMEOUT_SECONDS: float = float(os.environ.get("QUIZ_PROCTOR_LLM_TIMEOUT", "60"))
