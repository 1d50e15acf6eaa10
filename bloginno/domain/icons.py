"""
Category icon registry.

Icons are looked up through an explicit name -> renderer slug table rather
than by attribute access into an icon library. Names outside the table are
rejected when a category is saved.
"""

from __future__ import annotations

import html

from bloginno.domain.errors import ValidationFailed

# Display name -> lucide icon slug
ICON_RENDERERS: dict[str, str] = {
    "Lightbulb": "lightbulb",
    "Rocket": "rocket",
    "ExternalLink": "external-link",
    "Bookmark": "bookmark",
    "Book": "book",
    "FileText": "file-text",
    "Image": "image",
    "Video": "video",
    "Music": "music",
    "Code": "code",
    "Terminal": "terminal",
    "Globe": "globe",
    "Map": "map",
    "Compass": "compass",
    "Award": "award",
    "Star": "star",
    "Heart": "heart",
    "Users": "users",
    "UserPlus": "user-plus",
    "Briefcase": "briefcase",
    "Building": "building",
    "Home": "home",
    "ShoppingBag": "shopping-bag",
    "Gift": "gift",
    "Calendar": "calendar",
    "Clock": "clock",
    "Bell": "bell",
    "MessageCircle": "message-circle",
    "Mail": "mail",
    "Phone": "phone",
    "Smartphone": "smartphone",
    "Laptop": "laptop",
    "Monitor": "monitor",
    "Camera": "camera",
    "Aperture": "aperture",
    "Palette": "palette",
    "PenTool": "pen-tool",
    "Tag": "tag",
    "RefreshCw": "refresh-cw",
}

ICON_NAMES: tuple[str, ...] = tuple(ICON_RENDERERS)


def validate_icon(name: str) -> str:
    """Return the icon name if it is in the registry, else raise ValidationFailed."""
    if name not in ICON_RENDERERS:
        raise ValidationFailed("icon", f"Unknown icon '{name}'")
    return name


def render_icon(name: str, css_class: str = "h-6 w-6") -> str:
    """Render an icon placeholder element for the client-side icon library."""
    slug = ICON_RENDERERS[validate_icon(name)]
    return f'<i data-lucide="{slug}" class="{html.escape(css_class, quote=True)}"></i>'


def search_icons(term: str) -> list[str]:
    """Case-insensitive substring filter over icon names, in registry order."""
    needle = term.strip().lower()
    if not needle:
        return list(ICON_NAMES)
    return [name for name in ICON_NAMES if needle in name.lower()]
