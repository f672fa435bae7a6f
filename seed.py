"""
Seed catalog, demo account and starter reviews.
"""
from typing import List

from auth import get_password_hash
from schemas import Address, Category, Product, Review, ReviewOrigin, User

DEMO_PASSWORD = "demo"

SEED_PRODUCTS = [
    {
        "id": "1",
        "name": "Digital Stethoscope Pro",
        "description": "Advanced digital stethoscope with noise cancellation and app integration for heart sound analysis.",
        "price": 299.99,
        "category": Category.EQUIPMENT,
        "image": "https://images.unsplash.com/photo-1631217868264-e5b90bb7e133?auto=format&fit=crop&w=800&q=80",
        "rating": 4.8,
        "reviews": 124,
        "in_stock": True,
        "brand": "MediTech",
        "features": ["Digital", "Bluetooth", "Noise Cancellation"],
    },
    {
        "id": "2",
        "name": "Immunity Multi-Vitamin Complex",
        "description": "Comprehensive daily supplement supporting immune system health with Zinc, Vitamin C, and D3.",
        "price": 24.50,
        "category": Category.WELLNESS,
        "image": "https://images.unsplash.com/photo-1584308666744-24d5c474f2ae?auto=format&fit=crop&w=800&q=80",
        "rating": 4.5,
        "reviews": 850,
        "in_stock": True,
        "brand": "VitalLife",
        "features": ["Organic", "Gluten-Free", "Non-GMO"],
    },
    {
        "id": "3",
        "name": "Clinical Grade Pulse Oximeter",
        "description": "Accurate blood oxygen saturation (SpO2) and pulse rate monitor.",
        "price": 45.00,
        "category": Category.EQUIPMENT,
        "image": "https://images.unsplash.com/photo-1583324113626-70df0f4deaab?auto=format&fit=crop&w=800&q=80",
        "rating": 4.6,
        "reviews": 320,
        "in_stock": True,
        "brand": "MediTech",
        "features": ["Digital", "Portable", "Battery Included"],
    },
    {
        "id": "4",
        "name": "Premium First Aid Kit (Professional)",
        "description": "200-piece industrial first aid kit suitable for offices and small clinics.",
        "price": 89.99,
        "category": Category.SUPPLIES,
        "image": "https://images.unsplash.com/photo-1603398938378-e54eab446dde?auto=format&fit=crop&w=800&q=80",
        "rating": 4.9,
        "reviews": 56,
        "in_stock": True,
        "brand": "SafetyFirst",
        "features": ["Comprehensive", "Sterile", "Compact"],
    },
    {
        "id": "5",
        "name": "Non-Contact Infrared Thermometer",
        "description": "Instant and accurate temperature readings without physical contact.",
        "price": 35.99,
        "category": Category.EQUIPMENT,
        "image": "https://images.unsplash.com/photo-1584634731339-252c581abfc5?auto=format&fit=crop&w=800&q=80",
        "rating": 4.4,
        "reviews": 2100,
        "in_stock": True,
        "brand": "MediTech",
        "features": ["Non-Contact", "Digital", "Instant Read"],
    },
    {
        "id": "6",
        "name": "Organic Whey Protein Isolate",
        "description": "Grass-fed whey protein for recovery and muscle support. Unflavored, medical grade.",
        "price": 55.00,
        "category": Category.WELLNESS,
        "image": "https://images.unsplash.com/photo-1579722821273-0f6c7d44362f?auto=format&fit=crop&w=800&q=80",
        "rating": 4.7,
        "reviews": 112,
        "in_stock": True,
        "brand": "VitalLife",
        "features": ["Organic", "Gluten-Free", "High Protein"],
    },
    {
        "id": "7",
        "name": "Sterile Surgical Gloves (Box of 100)",
        "description": "Powder-free, latex-free nitrile exam gloves.",
        "price": 18.50,
        "category": Category.SUPPLIES,
        "image": "https://images.unsplash.com/photo-1582719478250-c89cae4dc85b?auto=format&fit=crop&w=800&q=80",
        "rating": 4.8,
        "reviews": 430,
        "in_stock": True,
        "brand": "SafeHands",
        "features": ["Sterile", "Latex-Free", "Disposable"],
    },
    {
        "id": "8",
        "name": "Khemixall Pain Relief Gel",
        "description": "Fast-acting topical analgesic for arthritis and muscle pain.",
        "price": 12.99,
        "category": Category.PHARMACEUTICALS,
        "image": "https://images.unsplash.com/photo-1620916566398-39f1143ab7be?auto=format&fit=crop&w=800&q=80",
        "rating": 4.3,
        "reviews": 150,
        "in_stock": True,
        "brand": "Khemixall Pharma",
        "features": ["Fast-Acting", "Topical", "Pain Relief"],
    },
]

SEED_REVIEWS = [
    {
        "id": "seed-1",
        "product_id": "1",
        "author": "Dr. Anita Rao",
        "rating": 5,
        "date": "2 weeks ago",
        "title": "Crystal clear heart sounds",
        "text": "The noise cancellation makes a real difference on a busy ward.",
        "origin": ReviewOrigin.SEEDED,
    },
    {
        "id": "seed-2",
        "product_id": "3",
        "author": "Mark T.",
        "rating": 4,
        "date": "1 month ago",
        "text": "Readings match our clinic unit. Battery life could be better.",
        "origin": ReviewOrigin.SEEDED,
    },
]


def seed_products() -> List[Product]:
    return [Product(**p) for p in SEED_PRODUCTS]


def seed_reviews() -> List[Review]:
    return [Review(**r) for r in SEED_REVIEWS]


def seed_users() -> List[User]:
    return [
        User(
            id="u1",
            name="Demo User",
            email="user@khemixall.com",
            address=Address(street="123 Medical Way", city="Tech City", state="CA", zip="90210", country="USA"),
            password_hash=get_password_hash(DEMO_PASSWORD),
        )
    ]
