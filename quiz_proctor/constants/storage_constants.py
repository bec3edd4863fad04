"""Location of the on-disk quiz store."""

import os
from pathlib import Path

DATA_DIR: Path = Path(
    os.environ.get("QUIZ_PROCTOR_DATA_DIR", str(Path.home() / ".quiz_proctor"))
).expanduser()

PROFESSORS_FILE: str = "professors.json"
QUIZZES_FILE: str = "quizzes.json"
RESULTS_FILE: str = "results.json"
