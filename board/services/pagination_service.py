from board.config import settings


def get_pagination_bar_numbers(
    current_page: int,
    total_pages: int,
    bar_length: int | None = None,
) -> list[int]:
    """
    Return the 1-based page numbers to show in the pagination bar.

    The window tries to keep *current_page* in the middle, never starts
    below page 1 and never runs past *total_pages*.
    """
    if bar_length is None:
        bar_length = settings.PAGINATION_BAR_LENGTH
    start = max(current_page - bar_length // 2, 1)
    end = min(start + bar_length, total_pages + 1)
    return list(range(start, end))
