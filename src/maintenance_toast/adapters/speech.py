"""Text-to-speech adapter using the SAPI voice through comtypes."""

from __future__ import annotations

import locale
import logging

logger = logging.getLogger(__name__)


def _create_voice():
    import comtypes.client

    comtypes.CoInitialize()
    return comtypes.client.CreateObject("SAPI.SpVoice")


def culture_lcid(culture: str) -> int | None:
    wanted = culture.replace("-", "_").lower()
    return next((lcid for lcid, name in locale.windows_locale.items() if name.lower() == wanted), None)


def _voice_for(voice, culture: str):
    """Installed voice whose Language attribute (hex LCIDs) covers the culture."""
    lcid = culture_lcid(culture)
    if lcid is None:
        return None
    tokens = voice.GetVoices()
    for index in range(tokens.Count):
        token = tokens.Item(index)
        languages = token.GetAttribute("Language") or ""
        try:
            if lcid in {int(part, 16) for part in languages.split(";") if part}:
                return token
        except ValueError:
            continue
    return None


class SapiSpeech:
    """SpeechOutput that speaks synchronously with a SAPI voice."""

    def speak(self, text: str, culture: str) -> None:
        voice = _create_voice()
        try:
            token = _voice_for(voice, culture)
            if token is not None:
                voice.Voice = token
            else:
                logger.info("No voice installed for %s, using the default voice", culture)
            voice.Speak(text)
        finally:
            import comtypes

            comtypes.CoUninitialize()
