"""
Wrapping list selection shared by the view models.
"""


def next_index(index: int, count: int) -> int:
    return (index + 1) % count if count > 0 else 0


def previous_index(index: int, count: int) -> int:
    return (index - 1) % count if count > 0 else 0


def clamp_index(index: int, count: int) -> int:
    return min(max(index, 0), max(count - 1, 0))


def scroll_to(selected: int, offset: int, visible_height: int) -> int:
    """
    Return a scroll offset that keeps ``selected`` inside the visible window.

    A height of 0 leaves the offset unchanged.
    """
    if visible_height <= 0:
        return offset
    if selected < offset:
        return selected
    if selected >= offset + visible_height:
        return selected - visible_height + 1
    return offset
