"""
Genre translation

TVHeadend reports program genres as ETSI EN 300 468 content type codes
(0-255). This module maps them to English labels and to the coarse
categories the host uses for guide filtering.
"""
from enum import Enum
from collections.abc import Iterable


GENRE_LABELS: dict[int, str] = {
    # Undefined and reserved
    0: "Undefined",
    240: "Reserved for future use",

    # Movie/Drama
    16: "Movie/Drama",
    17: "Detective/Thriller",
    18: "Adventure/Western/War",
    19: "Science Fiction/Fantasy/Horror",
    20: "Comedy",
    21: "Soap/Melodrama/Drama",
    22: "Romance",
    23: "Serious/Classical/Religious/Historical Movie/Drama",
    24: "Adult Movie/Drama",

    # News/Current Affairs
    32: "News/Current Affairs",
    33: "News/Weather Report",
    34: "News Magazine",
    35: "Documentary",
    36: "Discussion/Interview/Debate",

    # Show/Game Show
    48: "Show/Game Show",
    49: "Game Show/Quiz/Contest",
    50: "Variety Show",
    51: "Talk Show",

    # Sports
    64: "Sports",
    65: "Special Event",
    66: "Sports Magazine",
    67: "Football/Soccer",
    68: "Tennis/Squash",
    69: "Team Sports",
    70: "Athletics",
    71: "Motor Sport",
    72: "Water Sport",
    73: "Winter Sport",
    74: "Equestrian",
    75: "Martial Sports",

    # Children's/Youth Programs
    80: "Children's/Youth Programs",
    81: "Pre-school Children's Programs",
    82: "Entertainment/Cartoons",
    83: "Educational/School Programs",

    # Music/Ballet/Dance
    96: "Music/Ballet/Dance",
    97: "Rock/Pop",
    98: "Classical Music",
    99: "Folk/Traditional Music",
    100: "Jazz",
    101: "Opera",
    102: "Ballet",

    # Arts/Culture
    112: "Arts/Culture (without music)",
    113: "Performing Arts",
    114: "Fine Arts",
    115: "Religion",
    116: "Popular Culture/Tradition",
    117: "Literature",
    118: "Film/Cinema",
    119: "Experimental Film/Video",
    120: "Broadcasting/Press",
    121: "New Media",
    122: "Arts/Culture Magazine",
    123: "Fashion",

    # Social/Political/Economic
    128: "Social/Political/Economic",
    129: "Magazines/Reports/Documentary",
    130: "Economics/Social Advisory",
    131: "Remarkable People",

    # Education/Science/Factual
    144: "Education/Science/Factual",
    145: "Nature/Animals/Environment",
    146: "Technology/Medical",
    147: "Foreign Countries/Expeditions",
    148: "Social/Spiritual Sciences",
    149: "Further Education",
    150: "Languages",

    # Leisure Hobbies
    160: "Leisure Hobbies",
    161: "Tourism/Travel",
    162: "Handicraft",
    163: "Gardening",
    164: "Motors",
    165: "Fitness/Health",
    166: "Cooking",
    167: "Advertisement/Shopping",
    168: "Community",
}


class GenreCategory(str, Enum):
    """Coarse program categories used by the host guide"""
    MOVIE = "movie"
    NEWS = "news"
    SERIES = "series"
    SPORTS = "sports"
    KIDS = "kids"


# Inclusive code ranges, disjoint
CATEGORY_RANGES: dict[GenreCategory, range] = {
    GenreCategory.MOVIE: range(16, 25),
    GenreCategory.NEWS: range(32, 37),
    GenreCategory.SERIES: range(48, 52),
    GenreCategory.SPORTS: range(64, 76),
    GenreCategory.KIDS: range(80, 84),
}


def describe(code: int) -> str:
    """
    Get the English label for a genre code

    Args:
        code: ETSI content type code

    Returns:
        Label from the table, or "Unknown (<code>)" for codes outside it
    """
    return GENRE_LABELS.get(code, f"Unknown ({code})")


def describe_all(codes: Iterable[int] | None) -> list[str]:
    """Translate a sequence of genre codes, preserving order"""
    return [describe(code) for code in codes or ()]


def categorize(codes: Iterable[int] | None) -> frozenset[GenreCategory]:
    """
    Bucket genre codes into coarse categories

    Each category is tested independently, so a program carrying codes from
    several ranges belongs to several categories.

    Args:
        codes: ETSI content type codes of one program

    Returns:
        Set of matching categories (possibly empty)
    """
    codes = list(codes or ())
    return frozenset(
        category
        for category, code_range in CATEGORY_RANGES.items()
        if any(code in code_range for code in codes)
    )
