"""Line terminator detection for composite documents."""

CRLF = "\r\n"
LF = "\n"


def detect_line_ending(text: str) -> str:
    """Return the terminator used by ``text``, judged from its first line.

    A carriage return in the first line means the whole document is treated
    as CRLF; anything else is LF. Mixed endings are not tracked per line.

    Example:
        >>> detect_line_ending("a\\r\\nb\\n")
        '\\r\\n'
        >>> detect_line_ending("a\\nb\\r\\n")
        '\\n'
    """
    first_line = text.split(LF, 1)[0]
    return CRLF if "\r" in first_line else LF
