"""Human-readable byte counts for space check messages.

All messages use decimal (1000-based) units so figures match what file
managers show for volume capacity.
"""

_UNITS = ["KB", "MB", "GB", "TB", "PB"]


def format_bytes(num_bytes: int) -> str:
    """
    Format a byte count, e.g. ``500 GB``, ``990.1 GB``, ``12 KB``, ``1 byte``.

    Kilobytes are shown without decimals; larger units with one decimal place,
    dropping a trailing ``.0``.
    """
    sign = "-" if num_bytes < 0 else ""
    value = abs(num_bytes)

    if value < 1000:
        unit = "byte" if value == 1 else "bytes"
        return f"{sign}{value} {unit}"

    scaled = float(value)
    for index, unit in enumerate(_UNITS):
        scaled /= 1000
        digits = 0 if unit == "KB" else 1
        # 999.96 MB would print as 1000 MB; move up a unit instead
        if round(scaled, digits) < 1000 or index == len(_UNITS) - 1:
            break

    if unit == "KB":
        return f"{sign}{round(scaled):d} KB"

    text = f"{scaled:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{sign}{text} {unit}"
