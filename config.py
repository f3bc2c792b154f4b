"""
Central configuration for the RUB figure service.
Plot conventions (fonts, colors, number formatting) and service settings.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# Corporate design colors
RUB_COLORS = {
    "blue": "#17365C",
    "green": "#8DAE10",
    "gray": "#E7E7E7",
    "dark_gray": "#4A4A4A",
    "light_blue": "#6A8DB5",
    "light_green": "#C0D57A",
    "mid_gray": "#A5A5A5",
    "orange": "#E5A220",
    "white": "#FFFFFF",
}

# Plot conventions shared by every figure template
PLOT_CONFIG = {
    "base_family": os.getenv("RUB_BASE_FAMILY", "RubFlama"),
    "base_size": float(os.getenv("RUB_BASE_SIZE", "11")),
    "color": os.getenv("RUB_ACCENT_COLOR", RUB_COLORS["blue"]),
    "caption_prefix": os.getenv("RUB_CAPTION_PREFIX", "Quelle:"),

    # German locale: 1.234,5
    "decimal_mark": os.getenv("RUB_DECIMAL_MARK", ","),
    "big_mark": os.getenv("RUB_BIG_MARK", "."),

    "bar_width": 0.55,
    "line_width": 2,

    # Label suppression defaults
    "bar_cutoff": 0.04,   # ratio for 100% bars, absolute for count bars
    "line_cutoff": 5,     # absolute
}

# Application Configuration
APP_CONFIG = {
    "debug": os.getenv("DEBUG", "true").lower() == "true",
    "name": "RUB Figure Service",
    "version": "1.0.0",

    # Server settings
    "host": os.getenv("HOST", "0.0.0.0"),
    "port": int(os.getenv("PORT", "8000")),

    # Rows accepted by /render
    "max_rows": 10000,
}

# Logging Configuration
LOG_CONFIG = {
    "level": "INFO" if not APP_CONFIG["debug"] else "DEBUG",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
}


def check_config():
    """Check configuration and provide helpful messages."""
    logger = logging.getLogger(__name__)

    if PLOT_CONFIG["decimal_mark"] == PLOT_CONFIG["big_mark"]:
        logger.warning(
            f"Decimal mark and grouping mark are both '{PLOT_CONFIG['decimal_mark']}'. "
            "Axis labels will be ambiguous."
        )

    logger.debug(
        f"Plot style: {PLOT_CONFIG['base_family']} {PLOT_CONFIG['base_size']}pt, "
        f"accent {PLOT_CONFIG['color']}, caption prefix '{PLOT_CONFIG['caption_prefix']}'"
    )


# Run config check on import
check_config()
