def format_size(size: float) -> str:
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}TB"


def format_duration(seconds: float) -> str:
    """Whole minutes and seconds, e.g. ``3 min 5 sec``."""
    total = int(seconds)
    return f"{total // 60} min {total % 60} sec"
