"""
Prompt catalogue for empty-room and staging generations.

Style presets and room types form closed enumerations; prompts are composed
from a fixed architectural-preservation preamble plus a style directive.

Dependencies: None (pure domain layer)
System role: Provider prompt construction
"""

from enum import Enum


class StylePreset(str, Enum):
    """Staging style presets."""

    MODERN = "modern"
    SCANDINAVIAN = "scandinavian"
    TRADITIONAL = "traditional"
    RUSTIC = "rustic"
    INDUSTRIAL = "industrial"
    BOHEMIAN = "bohemian"


class RoomType(str, Enum):
    """Room types a staging prompt can target."""

    LIVING_ROOM = "living_room"
    BEDROOM = "bedroom"
    KITCHEN = "kitchen"
    DINING_ROOM = "dining_room"
    BATHROOM = "bathroom"
    OFFICE = "office"
    FAMILY_ROOM = "family_room"
    DEN = "den"
    STUDY = "study"


DEFAULT_ROOM_TYPE = RoomType.LIVING_ROOM

ROOM_LABELS: dict[RoomType, str] = {
    RoomType.LIVING_ROOM: "living room",
    RoomType.BEDROOM: "bedroom",
    RoomType.KITCHEN: "kitchen",
    RoomType.DINING_ROOM: "dining room",
    RoomType.BATHROOM: "bathroom",
    RoomType.OFFICE: "home office",
    RoomType.FAMILY_ROOM: "family room",
    RoomType.DEN: "den",
    RoomType.STUDY: "study",
}

STYLE_DIRECTIVES: dict[StylePreset, str] = {
    StylePreset.MODERN: (
        "Modern style: sleek contemporary look, clean lines, neutral palette, "
        "minimalist decor and upscale furniture."
    ),
    StylePreset.SCANDINAVIAN: (
        "Scandinavian style: cozy minimalist decor, light woods, neutral tones "
        "and hygge elements."
    ),
    StylePreset.TRADITIONAL: (
        "Traditional style: classic timeless decor, rich fabrics, warm colours "
        "and elegant furniture."
    ),
    StylePreset.RUSTIC: (
        "Rustic style: farmhouse decor, natural materials, vintage pieces and "
        "cozy textiles."
    ),
    StylePreset.INDUSTRIAL: (
        "Industrial style: urban loft decor, metal fixtures, leather furniture "
        "and exposed elements."
    ),
    StylePreset.BOHEMIAN: (
        "Bohemian style: eclectic artistic decor, mixed patterns, vibrant "
        "colours, plants and textiles."
    ),
}

PRESERVATION_RULES = (
    "1. Keep every fixed architectural element identical to the input photo: walls, "
    "ceiling, floor, trim, windows and their spacing, doors, stairs, vents, switch "
    "plates, baseboards, curtains and walkways.\n"
    "2. Do NOT modify floor colour or material, grout lines, wall paint, window frames "
    "or the exterior view.\n"
    "3. Do NOT move, rotate, crop, zoom or change the camera perspective.\n"
)

EMPTY_ROOM_PROMPT = (
    "### VIRTUAL STAGING ONLY - EMPTY OUT THE WHOLE ROOM, DO NOT REMODEL\n"
    + PRESERVATION_RULES
    + "4. Remove movable furniture and decor only."
)

ALTERNATIVE_SUFFIXES = (
    " Alternative design approach.",
    " Alternative layout with a different furniture arrangement.",
    " Alternative accent colours and decor pieces.",
)


def parse_style(value: str) -> StylePreset:
    """Resolve a style string, raising ValueError for unknown presets."""
    return StylePreset(value.strip().lower())


def parse_room_type(value: str | None) -> RoomType:
    """Resolve a room type string; None or blank maps to the default."""
    if value is None or not value.strip():
        return DEFAULT_ROOM_TYPE
    return RoomType(value.strip().lower())


def build_empty_room_prompt() -> str:
    return EMPTY_ROOM_PROMPT


def build_staging_prompt(style: StylePreset, room_type: RoomType = DEFAULT_ROOM_TYPE) -> str:
    """
    Compose the staging prompt for one style and room type.

    Args:
        style: Style preset
        room_type: Room the photo shows

    Returns:
        Prompt text sent to the provider
    """
    return (
        "### VIRTUAL STAGING ONLY - DO NOT REMODEL\n"
        + PRESERVATION_RULES
        + f"4. Stage this {ROOM_LABELS[room_type]} using ONLY movable furniture and decor in the "
        + STYLE_DIRECTIVES[style]
        + "\n5. Present it like professional real estate photography."
    )


def build_staging_prompts(
    style: StylePreset,
    room_type: RoomType = DEFAULT_ROOM_TYPE,
    count: int = 2,
) -> list[str]:
    """
    Distinct prompts for an N-way staging fan-out.

    Variant 1 uses the base prompt; variant k >= 2 appends an alternative
    directive so every call asks for a different design.

    Args:
        style: Style preset shared by all variants
        room_type: Room the photo shows
        count: Number of variants

    Returns:
        One prompt per variant, in call order
    """
    base = build_staging_prompt(style, room_type)
    prompts = [base]
    for index in range(1, count):
        suffix = ALTERNATIVE_SUFFIXES[(index - 1) % len(ALTERNATIVE_SUFFIXES)]
        if index > len(ALTERNATIVE_SUFFIXES):
            suffix = f"{suffix} Variation {index + 1}."
        prompts.append(base + suffix)
    return prompts
