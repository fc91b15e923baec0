from __future__ import annotations

from banner_studio.errors import UnknownFilterError

# (label, value); the first entry is the default selection.
ASPECT_RATIOS: list[tuple[str, str]] = [
    ("Landscape", "16:9"),
    ("Portrait", "9:16"),
    ("Square", "1:1"),
    ("Standard", "4:3"),
    ("Social", "3:4"),
]

DEFAULT_ASPECT_RATIO = ASPECT_RATIOS[0][1]

EDIT_FILTERS: dict[str, str] = {
    "Vintage": (
        "Apply a warm, faded vintage filter. Desaturate the colors slightly and add subtle grain and light leaks."
    ),
    "Noir": (
        "Convert the image to a high-contrast black and white noir style. Deepen the blacks and brighten "
        "the highlights to create a dramatic, moody atmosphere."
    ),
    "Vibrant": (
        "Boost the color saturation and vibrancy to make the image pop. Increase contrast for a more "
        "dynamic and energetic look."
    ),
    "Cinematic": (
        "Apply a cinematic color grade. Add a slight teal and orange look to the shadows and highlights. "
        "Add subtle cinematic letterboxing."
    ),
}


def is_aspect_ratio(value: str) -> bool:
    return any(v == value for _, v in ASPECT_RATIOS)


def filter_instruction(name: str) -> str:
    key = (name or "").strip().lower()
    for filter_name, instruction in EDIT_FILTERS.items():
        if filter_name.lower() == key:
            return instruction
    raise UnknownFilterError(f"Unknown editing filter: {name!r}")
