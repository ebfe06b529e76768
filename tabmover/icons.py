"""Generate the extension's toolbar icons: two screens and an arrow."""

import json
import logging
import os

from PIL import Image, ImageDraw

ICON_SIZES = (16, 48, 128)

DEFAULT_EXTENSION_DIR = os.path.join("extensions", "chromebased-browser")

logger = logging.getLogger("TabMover.Icons")


def create_icon(size, output_path):
    """Create one square icon and save it as PNG.

    Returns:
        str: output_path
    """
    img = Image.new("RGBA", (size, size), color="#4A90E2")
    draw = ImageDraw.Draw(img)

    pad = max(1, size // 8)
    gap = max(1, size // 16)
    screen_w = (size - 2 * pad - gap) // 2
    top = size // 4
    bottom = size - size // 4
    outline = max(1, size // 24)

    # Left screen hollow, right screen filled
    draw.rectangle(
        (pad, top, pad + screen_w, bottom), outline="white", width=outline
    )
    right_left = pad + screen_w + gap
    draw.rectangle((right_left, top, right_left + screen_w, bottom), fill="white")

    # Arrow from the left screen into the right one
    mid_y = size // 2
    head = max(2, size // 8)
    tail_x = pad + screen_w // 3
    tip_x = right_left + screen_w // 2
    draw.line((tail_x, mid_y, tip_x - head, mid_y), fill="#F5A623", width=max(1, size // 12))
    draw.polygon(
        [(tip_x, mid_y), (tip_x - head, mid_y - head), (tip_x - head, mid_y + head)],
        fill="#F5A623",
    )

    img.save(output_path, "PNG")
    logger.info(f"Created {output_path} ({size}x{size})")
    return output_path


def generate_icons(extension_dir=DEFAULT_EXTENSION_DIR):
    """Write all icon sizes to ``<extension_dir>/icons`` and list them in its manifest.

    The manifest is left alone when the directory has none.

    Returns:
        list: Paths of the written files
    """
    icons_dir = os.path.join(extension_dir, "icons")
    os.makedirs(icons_dir, exist_ok=True)
    paths = [
        create_icon(size, os.path.join(icons_dir, f"icon{size}.png"))
        for size in ICON_SIZES
    ]

    manifest_path = os.path.join(extension_dir, "manifest.json")
    if os.path.exists(manifest_path):
        with open(manifest_path, "r") as f:
            manifest = json.load(f)
        manifest["icons"] = {str(size): f"icons/icon{size}.png" for size in ICON_SIZES}
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2)
            f.write("\n")
        logger.info(f"Registered icons in {manifest_path}")

    return paths
