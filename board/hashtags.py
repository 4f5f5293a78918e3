"""Hashtag extraction from article bodies."""

import re

# Length of the ``hashtags.name`` column; longer tokens are not hashtags.
HASHTAG_NAME_MAX_LENGTH = 255

# '#' followed by 1-255 word characters. Anything outside \w (spaces,
# punctuation, hyphens) ends the token: "#spring-boot" yields "spring".
# A run of more than 255 word characters matches nothing at all.
HASHTAG_PATTERN = re.compile(rf"#(\w{{1,{HASHTAG_NAME_MAX_LENGTH}}})(?!\w)")


def extract_hashtag_names(text: str | None) -> set[str]:
    """Return the distinct hashtag names in *text*, without '#', case kept."""
    if not text:
        return set()
    return {match.group(1) for match in HASHTAG_PATTERN.finditer(text)}
