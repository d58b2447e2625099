import re
import time
from typing import Optional


def human_readable_size(size_in_bytes: int) -> str:
    """Converts bytes to a human readable string (e.g. 10.5 MB)."""
    if size_in_bytes is None:
        return "Unknown"

    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_in_bytes < 1024.0:
            return f"{size_in_bytes:.2f} {unit}"
        size_in_bytes /= 1024.0
    return f"{size_in_bytes:.2f} PB"


def slugify_title(title: Optional[str], max_length: int = 100) -> str:
    """Replace every non-alphanumeric character with '_' and lower-case."""
    slug = re.sub(r'[^a-z0-9]', '_', title or '', flags=re.IGNORECASE).lower()
    return slug[:max_length] or 'video'


def download_filename(title: Optional[str], token: Optional[int] = None) -> str:
    """Suggested attachment name: ``<millis>_<slug>.mp4``."""
    if token is None:
        token = int(time.time() * 1000)
    return f"{token}_{slugify_title(title)}.mp4"


def format_duration(seconds: Optional[int]) -> str:
    """Format seconds as H:MM:SS or M:SS."""
    if seconds is None:
        return "Unknown"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
