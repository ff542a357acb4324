from pathlib import Path
from verifypro.config import settings


def ensure_data_dirs(data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "uploads").mkdir(exist_ok=True)
    return path


def ensure_candidate_dir(candidate_id: str, data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    candidate_dir = path / "uploads" / candidate_id
    candidate_dir.mkdir(parents=True, exist_ok=True)
    return candidate_dir


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
