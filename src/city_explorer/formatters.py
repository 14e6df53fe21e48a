"""Render provider records as the text blocks returned by the tools."""

import json
from typing import Any, List, Optional

from .models import Activity, Place, PlaceDetails, PlacePhoto


def _or(value: Any, placeholder: str) -> Any:
    return placeholder if value is None or value == "" else value


def _categories(place: Place) -> str:
    return ", ".join(place.categories) or "No categories"


def _distance(place: Place) -> str:
    if place.distance is None:
        return "Distance unknown"
    distance = place.distance
    return f"{int(distance) if distance.is_integer() else distance}m"


def _json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# =====================================================================
# PLACES
# =====================================================================

def format_places(places: List[Place], near: str, query: str) -> str:
    """Numbered list of search results, one block per place."""
    entries = [
        f"{index}. **{_or(place.name, 'Unknown')}**\n"
        f"   📍 {_or(place.address, 'Address not available')}\n"
        f"   🏷️ {_categories(place)}\n"
        f"   📏 {_distance(place)}\n"
        f"   🌍 {_or(place.latitude, 'No lat')}, {_or(place.longitude, 'No lng')}\n"
        f"   🔗 {_or(place.link, 'No link')}\n"
        f"   🆔 ID: {place.fsq_place_id}\n"
        for index, place in enumerate(places, start=1)
    ]
    return f'Found {len(places)} places near "{near}" matching "{query}":\n\n' + "\n".join(entries)


def format_place_details(place: PlaceDetails) -> str:
    """Full detail card: rating, opening hours and contact information."""
    hours = _json(place.hours) if place.hours else "No hours info"
    return (
        f"**{_or(place.name, 'Unknown')}**\n\n"
        f"📍 **Address:** {_or(place.formatted_address, 'Address not available')}\n"
        f"🏷️ **Categories:** {_categories(place)}\n"
        f"⭐ **Rating:** {_or(place.rating, 'No rating')}\n"
        f"📊 **Popularity:** {_or(place.popularity, 'No popularity score')}\n"
        f"💰 **Price:** {_or(place.price, 'No price info')}\n"
        f"🕒 **Hours:** {hours}\n"
        f"📞 **Phone:** {_or(place.tel, 'No phone')}\n"
        f"📧 **Email:** {_or(place.email, 'No email')}\n"
        f"🌐 **Website:** {_or(place.website, 'No website')}\n"
        f"✅ **Verified:** {'Verified' if place.verified else 'Not verified'}\n"
        f"📝 **Description:** {_or(place.description, 'No description')}\n"
    )


def format_place_summary(place: PlaceDetails) -> str:
    """Compact detail card: location, distance and links only."""
    social_media = _json(place.social_media) if place.social_media else "No social media"
    return (
        f"**{_or(place.name, 'Unknown')}**\n\n"
        f"📍 **Address:** {_or(place.address, 'Address not available')}\n"
        f"🏷️ **Categories:** {_categories(place)}\n"
        f"🌍 **Location:** {_or(place.latitude, 'No lat')}, {_or(place.longitude, 'No lng')}\n"
        f"📏 **Distance:** {_distance(place)}\n"
        f"🔗 **Link:** {_or(place.link, 'No link')}\n"
        f"📱 **Social Media:** {social_media}\n"
    )


def format_photos(photos: List[PlacePhoto]) -> str:
    if not photos:
        return "No photos found for this place."

    entries = [
        f"{index}. **Size:** {photo.width}x{photo.height}\n"
        f"   **URL:** {photo.url}\n"
        f"   **Categories:** {', '.join(photo.categories) or 'No categories'}\n"
        for index, photo in enumerate(photos, start=1)
    ]
    return f"Found {len(photos)} photos:\n\n" + "\n".join(entries)


# =====================================================================
# ACTIVITIES
# =====================================================================

def _price(activity: Activity) -> str:
    if not activity.price.amount:
        return "Price not available"
    return f"{activity.price.amount} {activity.price.currency or ''}".rstrip()


def format_activities(activities: List[Activity], city: str, activity_type: Optional[str] = None) -> str:
    """Numbered list of activities with booking link, price, image and description."""
    label = f"{activity_type} activities" if activity_type else "activities"
    entries = [
        f"{index}. **{_or(activity.name, 'Unknown')}**\n"
        f"   🔗 {_or(activity.link, 'No booking link')}\n"
        f"   💰 {_price(activity)}\n"
        f"   📸 {_or(activity.image, 'No image')}\n"
        f"   📝 {_or(activity.description, 'No description')}\n"
        for index, activity in enumerate(activities, start=1)
    ]
    return f"Found {len(activities)} {label} in {city}:\n\n" + "\n".join(entries)
