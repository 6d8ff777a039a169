"""Static activity, theme and tip catalogue used by the itinerary generator."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

CATEGORIES: Tuple[str, ...] = ("culture", "adventure", "nature", "beach", "nightlife", "food", "shopping")

COST_VALUES: Dict[str, int] = {
    "free": 0,
    "budget": 15,
    "moderate": 40,
    "expensive": 100,
}

PACE_ACTIVITY_COUNT: Dict[str, Tuple[int, int]] = {
    "relaxed": (2, 3),
    "moderate": (3, 5),
    "packed": (5, 7),
}

INTEREST_BONUS = 5
VIBE_TAG_BONUS = 2

# Words that tie a free-text interest or vibe tag to a category.
CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "culture": ("culture", "cultural", "histor", "heritage", "museum", "art", "ancient", "architecture", "temple"),
    "adventure": ("adventure", "active", "outdoor", "hiking", "thrill", "sport"),
    "nature": ("nature", "scenic", "mountain", "park", "garden", "wildlife", "green"),
    "beach": ("beach", "coast", "tropical", "seaside", "island", "surf"),
    "nightlife": ("nightlife", "party", "club", "bar", "vibrant", "music"),
    "food": ("food", "culinary", "gastronom", "cuisine", "dining", "wine"),
    "shopping": ("shopping", "market", "boutique", "fashion"),
}

THEMES: Dict[str, Tuple[str, ...]] = {
    "culture": ("Cultural Exploration", "History & Heritage", "Arts & Museums"),
    "adventure": ("Adventure Day", "Active Exploration", "Outdoor Adventures"),
    "food": ("Culinary Journey", "Food & Flavors", "Local Gastronomy"),
    "nature": ("Nature & Scenery", "Parks & Gardens", "Natural Wonders"),
    "nightlife": ("Evening Entertainment", "Nightlife Discovery", "After Dark"),
    "beach": ("Beach & Relaxation", "Coastal Day", "Seaside Escape"),
    "shopping": ("Shopping & Markets", "Local Finds", "Retail Exploration"),
}

TRANSPORT_TIPS: Dict[str, Tuple[str, ...]] = {
    "Asia": (
        "Consider purchasing a day pass for public transit",
        "Download local transport apps for real-time schedules",
        "Taxis are affordable but agree on the fare before starting",
        "Many cities have excellent metro systems",
    ),
    "Europe": (
        "Walking is often the best way to explore city centers",
        "Consider a multi-day transit pass for savings",
        "Trains are reliable and comfortable for day trips",
        "Bike-sharing programs are widely available",
    ),
    "North America": (
        "Ride-sharing apps are widely available",
        "Consider renting a car for flexibility outside city centers",
        "Public transit varies by city, so research ahead",
        "Many downtown areas are walkable",
    ),
    "default": (
        "Research local transport options before arriving",
        "Keep some local currency for transport",
        "Download offline maps for navigation",
        "Consider walking for short distances",
    ),
}

MEALS: Tuple[Dict[str, str], ...] = (
    {"meal_type": "breakfast", "suggestion": "Local café or hotel breakfast", "cuisine_type": "Local", "price_range": "$10-20"},
    {"meal_type": "lunch", "suggestion": "Try a local restaurant near your activities", "cuisine_type": "Local", "price_range": "$15-30"},
    {"meal_type": "dinner", "suggestion": "Explore the local dining scene", "cuisine_type": "Local", "price_range": "$20-50"},
)


@dataclass(frozen=True)
class ActivityTemplate:
    id: str
    name: str
    description: str
    time_slot: str
    start_time: str
    duration: int
    cost: str
    category: str
    vibe_tags: Tuple[str, ...] = field(default_factory=tuple)
    reservation_required: Optional[bool] = None


def _t(*args, **kwargs) -> ActivityTemplate:
    return ActivityTemplate(*args, **kwargs)


ACTIVITY_TEMPLATES: Dict[Tuple[str, str], Tuple[ActivityTemplate, ...]] = {
    ("culture", "morning"): (
        _t("temple-visit", "Temple or Shrine Visit", "Start the day at a historic temple or shrine",
           "morning", "08:00", 90, "budget", "culture", ("Cultural", "Spiritual", "Historic")),
        _t("museum-morning", "Museum Exploration", "Explore local art and history at a renowned museum",
           "morning", "09:30", 120, "moderate", "culture", ("Cultural", "Art", "Educational")),
        _t("walking-tour", "Historic District Walking Tour", "Guided walking tour through the old town",
           "morning", "10:00", 150, "moderate", "culture", ("Cultural", "Historic", "Local"), True),
    ),
    ("culture", "afternoon"): (
        _t("gallery-visit", "Art Gallery Visit", "Contemporary and traditional art collections",
           "afternoon", "14:00", 90, "budget", "culture", ("Art", "Cultural")),
        _t("historic-site", "Historic Landmark Visit", "Explore an iconic historic site",
           "afternoon", "15:00", 120, "moderate", "culture", ("Historic", "Architecture")),
    ),
    ("culture", "evening"): (
        _t("traditional-show", "Traditional Performance", "Local traditional arts and performance",
           "evening", "19:00", 120, "moderate", "culture", ("Cultural", "Entertainment"), True),
    ),
    ("food", "morning"): (
        _t("food-market", "Local Food Market Tour", "Taste fresh produce at a vibrant local market",
           "morning", "08:00", 120, "budget", "food", ("Food Paradise", "Local", "Authentic")),
        _t("cooking-class", "Morning Cooking Class", "Learn to cook local dishes with a chef",
           "morning", "09:00", 180, "moderate", "food", ("Food Paradise", "Cultural", "Hands-on"), True),
    ),
    ("food", "afternoon"): (
        _t("food-tour", "Street Food Walking Tour", "Sample the best street food in town",
           "afternoon", "14:00", 180, "moderate", "food", ("Food Paradise", "Local")),
        _t("tea-ceremony", "Traditional Tea Experience", "Take part in a traditional tea ceremony",
           "afternoon", "15:00", 90, "moderate", "food", ("Cultural", "Relaxing")),
    ),
    ("food", "evening"): (
        _t("fine-dining", "Local Fine Dining", "Savor local cuisine at a top restaurant",
           "evening", "19:00", 150, "expensive", "food", ("Food Paradise", "Luxury"), True),
        _t("night-market", "Night Market Exploration", "Graze through the night food scene",
           "evening", "19:30", 120, "budget", "food", ("Food Paradise", "Nightlife", "Local")),
    ),
    ("adventure", "morning"): (
        _t("hiking", "Morning Hike", "Scenic trail with panoramic views",
           "morning", "07:00", 180, "free", "adventure", ("Adventure", "Nature", "Active")),
        _t("bike-tour", "Cycling Tour", "Explore the city on two wheels",
           "morning", "08:00", 150, "moderate", "adventure", ("Adventure", "Active", "Eco-friendly")),
    ),
    ("adventure", "afternoon"): (
        _t("water-activity", "Water Sports", "Kayaking, paddleboarding or similar",
           "afternoon", "14:00", 180, "moderate", "adventure", ("Adventure", "Active", "Water")),
        _t("zipline", "Adventure Park", "Zipline, climbing and other thrills",
           "afternoon", "15:00", 180, "expensive", "adventure", ("Adventure", "Thrilling"), True),
    ),
    ("nature", "morning"): (
        _t("park-walk", "Morning Park Walk", "Peaceful walk through landscaped gardens",
           "morning", "07:30", 90, "free", "nature", ("Nature", "Relaxing", "Scenic")),
        _t("botanical-garden", "Botanical Garden Visit", "Diverse plant collections and quiet paths",
           "morning", "09:00", 120, "budget", "nature", ("Nature", "Relaxing", "Educational")),
    ),
    ("nature", "afternoon"): (
        _t("scenic-viewpoint", "Scenic Viewpoint", "A famous viewpoint with sweeping panoramas",
           "afternoon", "16:00", 90, "free", "nature", ("Nature", "Scenic", "Photography")),
    ),
    ("beach", "morning"): (
        _t("sunrise-swim", "Sunrise Swim", "Early swim before the beach fills up",
           "morning", "07:00", 60, "free", "beach", ("Beach", "Relaxing")),
    ),
    ("beach", "afternoon"): (
        _t("beach-lounging", "Beach Afternoon", "Unwind on the sand with a good book",
           "afternoon", "13:30", 180, "free", "beach", ("Beach", "Relaxing", "Sunny")),
        _t("snorkeling", "Snorkeling Trip", "Guided snorkeling over a nearby reef",
           "afternoon", "14:30", 150, "moderate", "beach", ("Beach", "Adventure", "Water"), True),
    ),
    ("beach", "evening"): (
        _t("beach-bar", "Beachfront Sundowner", "Drinks by the water as the sun sets",
           "evening", "18:00", 90, "budget", "beach", ("Beach", "Romantic")),
    ),
    ("nightlife", "evening"): (
        _t("rooftop-bar", "Rooftop Bar Experience", "Sunset drinks with city views",
           "evening", "18:00", 120, "moderate", "nightlife", ("Nightlife", "Trendy", "Views")),
        _t("live-music", "Live Music Venue", "Catch the local music scene",
           "evening", "21:00", 180, "moderate", "nightlife", ("Nightlife", "Entertainment", "Music")),
    ),
    ("nightlife", "night"): (
        _t("club-night", "Nightclub Experience", "Dance the night away at a popular club",
           "night", "23:00", 240, "expensive", "nightlife", ("Nightlife", "Dancing", "Party")),
    ),
    ("shopping", "morning"): (
        _t("flea-market", "Flea Market Browse", "Hunt for vintage finds at the weekend market",
           "morning", "09:30", 120, "free", "shopping", ("Shopping", "Local")),
    ),
    ("shopping", "afternoon"): (
        _t("artisan-quarter", "Artisan Quarter", "Independent makers and design shops",
           "afternoon", "14:30", 120, "budget", "shopping", ("Shopping", "Creative")),
    ),
    ("general", "morning"): (
        _t("neighborhood-explore", "Neighborhood Exploration", "Wander through a charming local neighborhood",
           "morning", "09:00", 120, "free", "exploration", ("Local", "Authentic")),
    ),
    ("general", "afternoon"): (
        _t("shopping-district", "Shopping District Visit", "Browse local shops and boutiques",
           "afternoon", "14:00", 150, "free", "shopping", ("Shopping", "Local")),
        _t("cafe-hopping", "Café Hopping", "Discover cozy local cafés",
           "afternoon", "15:00", 90, "budget", "food", ("Relaxing", "Local", "Trendy")),
    ),
    ("general", "evening"): (
        _t("sunset-spot", "Sunset Viewing", "Watch the sunset from a scenic spot",
           "evening", "17:30", 60, "free", "nature", ("Romantic", "Scenic", "Relaxing")),
        _t("dinner-local", "Local Restaurant Dinner", "Dinner at a well-reviewed local restaurant",
           "evening", "19:00", 120, "moderate", "food", ("Food Paradise", "Local")),
    ),
}

# The evening pass also draws from late-night venues.
SLOT_SOURCES: Dict[str, Tuple[str, ...]] = {
    "morning": ("morning",),
    "afternoon": ("afternoon",),
    "evening": ("evening", "night"),
}


def categories_for_terms(terms: Iterable[str]) -> List[str]:
    """Map free-text interests or vibe tags onto known categories; unknown terms map to nothing."""
    matched: List[str] = []
    for term in terms:
        words = re.findall(r"[a-z]+", (term or "").lower())
        for category in CATEGORIES:
            if category in matched:
                continue
            keywords = CATEGORY_KEYWORDS[category]
            if any(word.startswith(keyword) for word in words for keyword in keywords):
                matched.append(category)
    return matched


def transport_tips_for(continent: Optional[str]) -> Tuple[str, ...]:
    return TRANSPORT_TIPS.get(continent or "default", TRANSPORT_TIPS["default"])
