from __future__ import annotations

from .normalize import BOOKS_IMAGE, MEDICAL_IMAGE, TECH_IMAGE, WELLNESS_IMAGE
from .records import GiftRecommendation, ProductQuote


def fallback_gifts() -> list[GiftRecommendation]:
    """Example gifts shown when the model reply cannot be used."""
    return [
        GiftRecommendation(
            title="Premium Digital Stethoscope with Bluetooth Connectivity",
            description=(
                "Advanced digital stethoscope with Bluetooth connectivity and mobile app integration for modern "
                "Indian healthcare professionals. Noise cancellation and recording support better patient "
                "documentation, with Hindi language support in the companion app."
            ),
            category="Conference Gifts",
            price_range="₹8,500-12,200",
            rating=4.8,
            features=[
                "Bluetooth Connectivity",
                "Mobile App Integration",
                "Noise Cancellation",
                "GST Compliant",
                "2-Year Warranty",
            ],
            suitable_for=["Cardiologists", "General Physicians", "Medical Students"],
            availability="Available across India with same-day delivery in metro cities",
            image_url=MEDICAL_IMAGE,
        ),
        GiftRecommendation(
            title="Ayurvedic Stress Relief & Immunity Booster Gift Set",
            description=(
                "Curated set of Ashwagandha supplements, herbal teas and aromatherapy oils for healthcare "
                "professionals working in high-stress hospital environments. Every product is AYUSH certified "
                "and sourced from traditional Indian manufacturers."
            ),
            category="Wellness",
            price_range="₹3,200-4,800",
            rating=4.6,
            features=[
                "100% Natural Ingredients",
                "AYUSH Certified",
                "Stress Relief Formula",
                "Immunity Boosting",
                "Premium Packaging",
            ],
            suitable_for=["Hospital Staff", "Pharmaceutical Researchers", "Healthcare Administrators"],
            availability="Pan-India delivery with temperature-controlled shipping",
            image_url=WELLNESS_IMAGE,
        ),
        GiftRecommendation(
            title="Smart Health Monitoring Kit with Indian Language Support",
            description=(
                "BP monitor, glucometer and pulse oximeter with Hindi and regional language displays. Suited to "
                "telemedicine and rural healthcare programmes, with cloud sync that works alongside Ayushman "
                "Bharat schemes."
            ),
            category="Technology",
            price_range="₹6,500-9,200",
            rating=4.7,
            features=[
                "Multi-language Display",
                "Bluetooth Connectivity",
                "Mobile App Integration",
                "Cloud Data Storage",
                "BIS Certified",
            ],
            suitable_for=["Rural Healthcare Workers", "Telemedicine Practitioners", "Community Health Officers"],
            availability="Available in 28 states with local service support",
            image_url=TECH_IMAGE,
        ),
        GiftRecommendation(
            title="Professional Medical Reference Books Collection",
            description=(
                "Latest editions of the Indian Pharmacopoeia, drug interaction guides and clinical practice "
                "guidelines, with digital access codes for the online editions. A practical gift for continuing "
                "medical education."
            ),
            category="Educational Materials",
            price_range="₹4,500-6,800",
            rating=4.5,
            features=[
                "Latest Edition",
                "Digital Access Included",
                "Indian Medical Guidelines",
                "Professional Binding",
                "Quick Reference Cards",
            ],
            suitable_for=["Medical Practitioners", "Pharmacy Students", "Healthcare Researchers"],
            availability="Available through major Indian medical bookstores and online platforms",
            image_url=BOOKS_IMAGE,
        ),
    ]


def fallback_quote() -> ProductQuote:
    return ProductQuote(
        product_name="Medical Gift Product",
        suggested_price="₹2,500-4,000",
        market_comparison="8% below Indian market average",
        confidence=78,
        recommendations=[
            "Consider bulk pricing for orders over 50 units (GST inclusive)",
            "Add custom pharmaceutical branding for 15% premium",
            "Similar products range from ₹2,800-4,200 in current Indian market",
        ],
        category="Medical Accessories",
        features=["GST Compliant", "Pharmaceutical Grade", "Indian Market Optimized"],
        competitor_prices=[
            "Market Leader: ₹3,500-4,200",
            "Local Supplier: ₹2,800-3,200",
            "Import Range: ₹4,000-5,500",
        ],
    )
