from typing import Dict, List, Optional

UNKNOWN_GENRE = "¯\\_(ツ)_/¯"

# First match wins. A multi-word genre must sit above any single-word genre
# it contains ("nu metal" above "metal"), otherwise it can never match.
GENRE_KEYWORDS: Dict[str, List[str]] = {
    "black metal": ["black metal"],
    "nu metal": ["nu metal"],
    "metal": ["metal"],
    "post punk": ["post punk", "post - punk", "post-punk"],
    "punk": ["punk"],
    "stoner rock": ["stoner rock"],
    "post rock": ["post rock", "post - rock", "post-rock"],
    "rock": ["rock"],
    "edm": ["edm"],
    "synth": ["synth"],
    "industrial": ["industrial"],
    "pop": ["pop"],
    "hip-hop": ["hip-hop", "hip hop"],
    "oi": ["oi"],
    "emo": ["emo"],
    "other": ["other"],
}


def find_genre(text: Optional[str], genre_keywords: Optional[Dict[str, List[str]]] = None) -> str:
    """Return the first genre whose keywords occur in ``text`` (case-insensitive), else UNKNOWN_GENRE."""
    keywords_by_genre = genre_keywords if genre_keywords is not None else GENRE_KEYWORDS
    lowered = (text or "").lower()
    for genre, keywords in keywords_by_genre.items():
        if any(keyword in lowered for keyword in keywords):
            return genre
    return UNKNOWN_GENRE
