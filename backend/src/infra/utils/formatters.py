BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(bytes_size: int | float) -> str:
    if bytes_size < 0:
        raise ValueError("Bytes size must be non-negative")

    size = float(bytes_size)
    unit_index = 0

    while size >= 1024.0 and unit_index < len(BYTE_UNITS) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.2f} {BYTE_UNITS[unit_index]}"


def format_duration(elapsed_seconds: float) -> str:
    """``01d 02h 03m 04.50s`` style rendering of a non-negative duration."""
    if elapsed_seconds < 0:
        raise ValueError("Duration must be non-negative")

    minutes, seconds = divmod(elapsed_seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    days, hours = divmod(hours, 24)

    return f"{days:02d}d {hours:02d}h {minutes:02d}m {seconds:05.2f}s"
