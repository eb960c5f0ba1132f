from pathlib import Path

from dotenv import find_dotenv, load_dotenv


def load_env() -> None:
    """Load .env files without overriding variables already in the environment."""
    here = Path(__file__).resolve().parent
    backend_dir = here.parent
    repo_root = backend_dir.parent
    load_dotenv(dotenv_path=backend_dir / ".env", override=False)
    load_dotenv(dotenv_path=repo_root / ".env", override=False)
    load_dotenv(find_dotenv(usecwd=True), override=False)
