# -*- coding: utf-8 -*-
"""
src/fontlens/config.py

Module for handling application configuration.

This module defines default settings for FontLens, such as the OCR engine
parameters, the canonical rendering and comparison sizes, and the font
catalog source. It provides functionality to load user-defined settings from
a configuration file (config.ini), creating one with default values on the
first run.
"""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# --- Constants ---
APP_NAME = "FontLens"
DEFAULT_CONFIG_FILENAME = "config.ini"
DEFAULT_CACHE_DIRNAME = "font_cache"
API_KEY_ENV_VAR = "FONTLENS_GOOGLE_FONTS_API_KEY"

CATALOG_PROVIDERS = ("google", "system", "builtin")
MAX_RESULTS = 3


def get_app_dir() -> Path:
    """
    Gets the application's data directory in a cross-platform way.

    This directory is used to store the configuration file and the
    downloaded font files.

    - Windows: %APPDATA%/FontLens
    - macOS: ~/Library/Application Support/FontLens
    - Linux: ~/.config/FontLens

    Returns:
        Path: A Path object to the application's data directory.
    """
    if platform.system() == "Windows":
        app_dir = Path.home() / "AppData" / "Roaming" / APP_NAME
    elif platform.system() == "Darwin":  # macOS
        app_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # Linux and other Unix-like
        app_dir = Path.home() / ".config" / APP_NAME

    try:
        app_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create application directory {app_dir}: {e}")
    return app_dir


class Config:
    """
    Manages application configuration by loading defaults and overriding
    them with settings from a user-specific config file.
    """

    def __init__(self, app_dir: Optional[Path] = None):
        """
        Initializes the configuration manager.

        Args:
            app_dir (Path, optional): Directory holding config.ini. Defaults to
                                      the platform application directory.
        """
        self.parser = configparser.ConfigParser()
        self.app_dir = Path(app_dir) if app_dir is not None else get_app_dir()
        self.config_file_path = self.app_dir / DEFAULT_CONFIG_FILENAME

        self._load_defaults()
        self._load_from_file()

    def _load_defaults(self):
        """Sets the default configuration values in the parser object."""
        self.parser["General"] = {
            "results_count": "3"
        }
        self.parser["Processing"] = {
            "upscale_factor": "2.0",
            "ocr_languages": "en",
            "ocr_gpu": "False",
            "ocr_timeout": "30",
            "low_confidence_threshold": "70"
        }
        self.parser["Rendering"] = {
            "canvas_width": "800",
            "canvas_height": "200",
            "font_size": "48",
            "compare_size": "400"
        }
        self.parser["Catalog"] = {
            "provider": "google",
            "google_fonts_api_key": "",
            "catalog_limit": "20",
            "load_batch_size": "10",
            "http_timeout": "10",
            "font_cache_dir": ""
        }

    def _load_from_file(self):
        """
        Loads settings from the config.ini file, overriding defaults.
        If the file doesn't exist, it will be created with default values.
        """
        if not self.config_file_path.exists():
            self._save_defaults()
        else:
            self.parser.read(self.config_file_path)

    def _save_defaults(self):
        """Saves the current (default) configuration to the config file."""
        try:
            with open(self.config_file_path, 'w') as configfile:
                configfile.write(f"# {APP_NAME} Configuration File\n")
                configfile.write("# You can edit these values. Restart the app for changes to take effect.\n\n")
                self.parser.write(configfile)
        except OSError as e:
            # Non-critical: the defaults are still in memory.
            logger.warning(f"Could not write config file at {self.config_file_path}: {e}")

    # --- Properties to access settings easily and with correct types ---

    @property
    def results_count(self) -> int:
        """The number of top font matches to keep, between 1 and 3."""
        count = self.parser.getint("General", "results_count", fallback=MAX_RESULTS)
        if not 1 <= count <= MAX_RESULTS:
            logger.warning(f"results_count must be between 1 and {MAX_RESULTS}, got {count}; using {MAX_RESULTS}.")
            return MAX_RESULTS
        return count

    @property
    def upscale_factor(self) -> float:
        """The factor by which to upscale the region before OCR."""
        return self.parser.getfloat("Processing", "upscale_factor", fallback=2.0)

    @property
    def ocr_languages(self) -> List[str]:
        raw = self.parser.get("Processing", "ocr_languages", fallback="en")
        return [lang.strip() for lang in raw.split(",") if lang.strip()]

    @property
    def ocr_gpu(self) -> bool:
        return self.parser.getboolean("Processing", "ocr_gpu", fallback=False)

    @property
    def ocr_timeout(self) -> float:
        """Seconds to wait for the OCR engine before reporting a timeout."""
        return self.parser.getfloat("Processing", "ocr_timeout", fallback=30.0)

    @property
    def low_confidence_threshold(self) -> float:
        """OCR confidence (0-100) under which the user is warned."""
        return self.parser.getfloat("Processing", "low_confidence_threshold", fallback=70.0)

    @property
    def canvas_width(self) -> int:
        return self.parser.getint("Rendering", "canvas_width", fallback=800)

    @property
    def canvas_height(self) -> int:
        return self.parser.getint("Rendering", "canvas_height", fallback=200)

    @property
    def font_size(self) -> int:
        """Pixel size used for every rendered candidate."""
        return self.parser.getint("Rendering", "font_size", fallback=48)

    @property
    def compare_size(self) -> int:
        """Side of the square both buffers are resampled to before scoring."""
        return self.parser.getint("Rendering", "compare_size", fallback=400)

    @property
    def catalog_provider(self) -> str:
        provider = self.parser.get("Catalog", "provider", fallback="google").strip().lower()
        if provider not in CATALOG_PROVIDERS:
            logger.warning(f"Unknown catalog provider '{provider}', using 'google'.")
            return "google"
        return provider

    @property
    def google_fonts_api_key(self) -> str:
        """The Google Fonts API key. The environment variable takes precedence."""
        return os.environ.get(API_KEY_ENV_VAR) or self.parser.get(
            "Catalog", "google_fonts_api_key", fallback=""
        )

    @property
    def catalog_limit(self) -> int:
        return self.parser.getint("Catalog", "catalog_limit", fallback=20)

    @property
    def load_batch_size(self) -> int:
        return self.parser.getint("Catalog", "load_batch_size", fallback=10)

    @property
    def http_timeout(self) -> float:
        return self.parser.getfloat("Catalog", "http_timeout", fallback=10.0)

    @property
    def font_cache_dir(self) -> Path:
        """Where downloaded font files are kept."""
        configured = self.parser.get("Catalog", "font_cache_dir", fallback="").strip()
        if configured:
            return Path(configured).expanduser()
        return self.app_dir / DEFAULT_CACHE_DIRNAME


# --- Singleton Instance ---
# Other modules can import this instance directly.
# e.g., from fontlens.config import config
config = Config()


if __name__ == '__main__':
    print(f"--- {APP_NAME} Configuration ---")
    print(f"Application Data Directory: {config.app_dir}")
    print(f"Config file path: {config.config_file_path}")
    print(f"Font cache: {config.font_cache_dir}")

    print("\n--- Loaded Settings ---")
    print(f"Catalog provider: {config.catalog_provider}")
    print(f"OCR languages: {config.ocr_languages}")
    print(f"OCR timeout: {config.ocr_timeout}s")
    print(f"Canvas: {config.canvas_width}x{config.canvas_height} @ {config.font_size}px")
    print(f"Compare size: {config.compare_size}")
    print(f"Results to show: {config.results_count}")
