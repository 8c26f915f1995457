from __future__ import annotations

import base64
import binascii
import json
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .errors import InputError
from .records import (
    BuiltPrompt,
    CallType,
    InlineImage,
    ProductAnalysis,
    RecommendationRequest,
    ResponseShape,
    TextQuery,
)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.S)
_WHITESPACE_RE = re.compile(r"\s+")

GIFT_PROMPT = """You are an AI assistant specialized in Indian pharmaceutical gifting and medical products. Based on this query: {query}

Generate exactly {count} highly relevant and specific gift recommendations for Indian pharmaceutical professionals. You must respond with ONLY a valid JSON array, no other text.

Required JSON structure:

[
  {{
    "title": "Specific product name (e.g., 'Premium Digital Stethoscope with Bluetooth')",
    "description": "Detailed 3-4 sentence description explaining why this gift suits Indian pharmaceutical professionals, including specific benefits and use cases",
    "category": "Specific category (e.g., 'Medical Equipment', 'Educational Materials', 'Wellness Products')",
    "priceRange": "₹1,000-5,000",
    "rating": 4.5,
    "features": ["Specific feature 1", "Specific feature 2", "Specific feature 3", "Indian market specific feature"],
    "suitableFor": ["Specific professional role 1", "Specific professional role 2"],
    "availability": "Specific availability info (e.g., 'Pan-India delivery available')",
    "imageUrl": "https://images.pexels.com/photos/[id]/pexels-photo-[id].jpeg?auto=compress&cs=tinysrgb&w=600&h=400&fit=crop"
  }}
]

Requirements:
- Focus specifically on Indian pharmaceutical industry needs
- Include GST compliance and regulatory considerations
- Every priceRange is an INR range between ₹1,000 and ₹15,000 written like "₹2,500-3,800"
- rating is a number between 1 and 5
- At most 5 features and at most 3 suitableFor entries per gift
- Include real Pexels image URLs that match the product type
- Consider Indian cultural preferences, including Ayurvedic elements where relevant
- Gifts must suit medical conferences, hospitals and healthcare professionals

CRITICAL: Return ONLY the JSON array. No explanations, no markdown, no additional text."""

QUOTE_PROMPT = """You are an AI assistant specialized in Indian pharmaceutical market analysis.
{subject} for the Indian pharmaceutical gifting market.

You must respond with ONLY a valid JSON object, no other text.

Required JSON structure:
{{
  "productName": "Identified or suggested product name",
  "suggestedPrice": "₹2,500-3,800",
  "marketComparison": "5% below Indian market average",
  "confidence": 85,
  "recommendations": [
    "Specific recommendation 1 for Indian market",
    "Specific recommendation 2 with GST considerations",
    "Specific recommendation 3 for pharmaceutical gifting"
  ],
  "category": "Product category",
  "features": ["Key feature 1", "Key feature 2", "Key feature 3"],
  "competitorPrices": ["Competitor 1: ₹2,800-3,200", "Competitor 2: ₹3,500-4,000", "Market range: ₹2,500-4,500"]
}}

Requirements:
- Include 18% GST implications and bulk pricing options
- Use INR price ranges (e.g., ₹2,500-3,800) instead of single prices, between ₹1,000 and ₹15,000
- confidence is an integer percentage between 1 and 100
- At most 5 recommendations, 5 features and 3 competitorPrices

CRITICAL: Return ONLY the JSON object. No explanations, no markdown, no additional text."""


def build_prompt(request: RecommendationRequest, gift_count: int = 4) -> BuiltPrompt:
    """Render a request into the text (and optional image) sent to Gemini.

    Pure: the same request always yields the same prompt. Raises InputError for
    an empty query or a product analysis with neither image nor description.
    """
    if isinstance(request, TextQuery):
        return build_gift_prompt(request.query, gift_count=gift_count)
    if isinstance(request, ProductAnalysis):
        return build_quote_prompt(request.image_data, request.description)
    raise InputError(f"Unsupported request type: {type(request).__name__}")


def build_gift_prompt(query: str | None, gift_count: int = 4) -> BuiltPrompt:
    cleaned = (query or "").strip()
    if not cleaned:
        raise InputError("Search query cannot be empty")
    text = GIFT_PROMPT.format(query=json.dumps(cleaned, ensure_ascii=False), count=max(1, gift_count))
    return BuiltPrompt(prompt_text=text, shape=ResponseShape.ARRAY, call_type=CallType.GIFT_SEARCH)


def build_quote_prompt(image_data: str | None, description: str | None) -> BuiltPrompt:
    has_image = bool(image_data and image_data.strip())
    cleaned = (description or "").strip()
    if not has_image and not cleaned:
        raise InputError("Either product image or description is required")

    inline = parse_inline_image(image_data) if has_image else None
    if cleaned:
        subject = f"Analyze this product: {json.dumps(cleaned, ensure_ascii=False)}"
        if inline is not None:
            subject += " (a photo of the product is attached)"
    else:
        subject = "Analyze the product in the image"

    return BuiltPrompt(
        prompt_text=QUOTE_PROMPT.format(subject=subject),
        shape=ResponseShape.OBJECT,
        call_type=CallType.PRODUCT_QUOTE,
        inline_image=inline,
    )


def parse_inline_image(image_data: str) -> InlineImage:
    """Accept a `data:` URL or a bare base64 payload and return Gemini inline data."""
    raw = image_data.strip()
    mime: str | None = None
    match = _DATA_URL_RE.match(raw)
    if match:
        mime = match.group("mime").lower()
        raw = match.group("data")
        if not mime.startswith("image/"):
            raise InputError(f"Unsupported attachment type: {mime}")

    payload = _WHITESPACE_RE.sub("", raw)
    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InputError("Product image is not valid base64 data") from exc
    if not decoded:
        raise InputError("Product image is empty")

    return InlineImage(mime_type=mime or sniff_image_mime(decoded), data=payload)


def sniff_image_mime(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return "image/jpeg"
    return Image.MIME.get(fmt, "image/jpeg")
