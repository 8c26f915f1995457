from __future__ import annotations

import math
from typing import Any

from .records import GiftRecommendation, ProductQuote

_PEXELS_PARAMS = "?auto=compress&cs=tinysrgb&w=600&h=400&fit=crop"

MEDICAL_IMAGE = f"https://images.pexels.com/photos/40568/medical-appointment-doctor-healthcare-40568.jpeg{_PEXELS_PARAMS}"
WELLNESS_IMAGE = f"https://images.pexels.com/photos/3683074/pexels-photo-3683074.jpeg{_PEXELS_PARAMS}"
CONFERENCE_IMAGE = f"https://images.pexels.com/photos/1181406/pexels-photo-1181406.jpeg{_PEXELS_PARAMS}"
TECH_IMAGE = f"https://images.pexels.com/photos/4386466/pexels-photo-4386466.jpeg{_PEXELS_PARAMS}"
BOOKS_IMAGE = f"https://images.pexels.com/photos/159711/books-bookstore-book-reading-159711.jpeg{_PEXELS_PARAMS}"
GENERIC_IMAGE = f"https://images.pexels.com/photos/4033148/pexels-photo-4033148.jpeg{_PEXELS_PARAMS}"

# First matching row wins.
CATEGORY_IMAGES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("medical", "equipment"), MEDICAL_IMAGE),
    (("wellness", "ayurvedic"), WELLNESS_IMAGE),
    (("conference", "educational"), CONFERENCE_IMAGE),
    (("technology", "digital"), TECH_IMAGE),
    (("book", "education"), BOOKS_IMAGE),
)

MAX_FEATURES = 5
MAX_SUITABLE_FOR = 3
MAX_RECOMMENDATIONS = 5
MAX_COMPETITOR_PRICES = 3

DEFAULT_RATING = 4.0
DEFAULT_CONFIDENCE = 85
DEFAULT_GIFT_FEATURES = ("Professional Grade", "High Quality")
DEFAULT_SUITABLE_FOR = ("Healthcare Professionals",)


def image_for_category(category: str, title: str = "") -> str:
    for text in (category, title):
        lowered = (text or "").lower()
        for keywords, url in CATEGORY_IMAGES:
            if any(k in lowered for k in keywords):
                return url
    return GENERIC_IMAGE


def normalize_gift(value: Any, index: int = 0) -> GiftRecommendation:
    """Decode one loosely-typed gift record. Total: any input yields a full record."""
    data = value if isinstance(value, dict) else {}
    title = _text(data.get("title"), f"Gift Recommendation {index + 1}")
    category = _text(data.get("category"), "General")
    return GiftRecommendation(
        title=title,
        description=_text(data.get("description"), "No description available"),
        category=category,
        price_range=_text(_pick(data, "priceRange", "price_range"), "₹1,000-2,000"),
        rating=_rating(data.get("rating")),
        features=_text_list(data.get("features"), MAX_FEATURES, DEFAULT_GIFT_FEATURES),
        suitable_for=_text_list(_pick(data, "suitableFor", "suitable_for"), MAX_SUITABLE_FOR, DEFAULT_SUITABLE_FOR),
        availability=_text(data.get("availability"), "Available in India"),
        image_url=_text(_pick(data, "imageUrl", "image_url"), "") or image_for_category(category, title),
    )


def normalize_gifts(value: Any, limit: int | None = None) -> list[GiftRecommendation]:
    if not isinstance(value, list):
        return []
    items = value if limit is None else value[: max(0, limit)]
    return [normalize_gift(item, index) for index, item in enumerate(items)]


def normalize_quote(value: Any) -> ProductQuote:
    data = value if isinstance(value, dict) else {}
    return ProductQuote(
        product_name=_text(_pick(data, "productName", "product_name"), "Analyzed Product"),
        suggested_price=_text(_pick(data, "suggestedPrice", "suggested_price"), "Price analysis unavailable"),
        market_comparison=_text(
            _pick(data, "marketComparison", "market_comparison"), "Competitive with market average"
        ),
        confidence=_confidence(data.get("confidence")),
        recommendations=_text_list(data.get("recommendations"), MAX_RECOMMENDATIONS),
        category=_text(data.get("category"), "Medical Product"),
        features=_text_list(data.get("features"), MAX_FEATURES),
        competitor_prices=_text_list(
            _pick(data, "competitorPrices", "competitor_prices"), MAX_COMPETITOR_PRICES
        ),
    )


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    # ints of any size are finite; isfinite would overflow converting them to float.
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if _is_number(value):
        return str(value)
    return default


def _text_list(value: Any, limit: int, default: tuple[str, ...] = ()) -> list[str]:
    out: list[str] = []
    if isinstance(value, list):
        for item in value:
            text = _text(item, "")
            if text:
                out.append(text)
            if len(out) >= limit:
                break
    return out or list(default[:limit])


def _rating(value: Any) -> float:
    if not _is_number(value):
        return DEFAULT_RATING
    return float(min(max(value, 1), 5))


def _confidence(value: Any) -> int:
    if not _is_number(value):
        return DEFAULT_CONFIDENCE
    return int(min(max(round(value), 1), 100))
