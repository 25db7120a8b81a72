"""XML configuration adapter producing a structured Settings."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from xml.etree import ElementTree as ET

import requests

from ..core.errors import ConfigLoadError
from ..core.settings import FEATURES, OPTIONS, TEXTS, Option, Settings, parse_flag

logger = logging.getLogger(__name__)

FALLBACK_CULTURE = "en-US"
_KNOWN_ATTRS = ("Name", "Enabled", "Value", "Build", "Type")


def read_source(source: str) -> str:
    """Fetch the raw configuration text from a path or an http(s) URL."""
    if source.lower().startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=20)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ConfigLoadError(f"Could not fetch configuration from {source}: {e}") from e
        response.encoding = "utf-8"
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigLoadError(f"Could not read configuration file {source}: {e}") from e


def _culture_block(root: ET.Element, culture: str) -> ET.Element | None:
    return next((child for child in root if child.tag == culture), None)


def parse_settings(document: str, culture: str | None = None) -> Settings:
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise ConfigLoadError(f"Malformed configuration: {e}") from e

    features = set()
    options = {}
    for element in root:
        name = element.get("Name")
        if element.tag == "Feature" and name in FEATURES:
            if parse_flag(element.get("Enabled")):
                features.add(name)
        elif element.tag == "Option" and name in OPTIONS:
            options[name] = Option(
                enabled=parse_flag(element.get("Enabled")),
                value=element.get("Value"),
                build=element.get("Build"),
                type=element.get("Type"),
                attrs=MappingProxyType(
                    {k: v for k, v in element.attrib.items() if k not in _KNOWN_ATTRS}
                ),
            )

    multi_language = "MultiLanguageSupport" in options and options["MultiLanguageSupport"].enabled
    chosen = culture if multi_language and culture else FALLBACK_CULTURE
    block = _culture_block(root, chosen)
    if block is None and chosen != FALLBACK_CULTURE:
        logger.info("No texts for culture %s, falling back to %s", chosen, FALLBACK_CULTURE)
        chosen = FALLBACK_CULTURE
        block = _culture_block(root, chosen)
    if block is None:
        block = root

    texts = {}
    for element in block.findall("Text"):
        name = element.get("Name")
        if name in TEXTS:
            texts[name] = element.text or ""

    settings = Settings(features=frozenset(features), options=options, texts=texts, culture=chosen)
    settings.check_typed_values()
    return settings


def load_settings(source: str, culture: str | None = None) -> Settings:
    """Load and parse the configuration; any failure is a ConfigLoadError."""
    logger.info("Loading configuration from %s", source)
    return parse_settings(read_source(source), culture)
