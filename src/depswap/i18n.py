# In depswap/i18n.py - gettext-backed translator for user-facing messages

import gettext
from importlib import resources

# Languages we ship message catalogs for; anything else falls back to English.
LANGUAGE_CODE_MAP = {
    "en": "English",
}

SUPPORTED_LANGUAGES = dict(LANGUAGE_CODE_MAP)


class Translator:
    """
    A callable class that holds the global translation function.
    Falls back to the identity function when no catalog is available.
    """

    def __init__(self):
        self._translator = lambda s: s
        self.current_lang = "en"
        self.set_language()

    def set_language(self, lang_code=None):
        try:
            localedir = str(resources.files("depswap") / "locale")

            if lang_code is None:
                import locale

                lang_env = locale.getlocale()[0] or "en_US"
                lang_code = lang_env.split(".")[0]

            # Normalize language codes (handle both underscore and hyphen variants)
            if lang_code.replace("-", "_") in LANGUAGE_CODE_MAP:
                normalized_code = lang_code.replace("-", "_")
            else:
                normalized_code = lang_code

            langs_to_try = [normalized_code]
            if "_" in normalized_code:
                langs_to_try.append(normalized_code.split("_")[0])
            elif "-" in normalized_code:
                langs_to_try.append(normalized_code.split("-")[0])
            langs_to_try.append("en")

            translation = gettext.translation(
                "depswap", localedir=localedir, languages=langs_to_try, fallback=True
            )
            self._translator = translation.gettext
            self.current_lang = translation.info().get("language", normalized_code)
        except Exception:
            self.current_lang = "en"
            self._translator = lambda s: s

    def __call__(self, text):
        return self._translator(text)


def setup_i18n(lang_code=None):
    """Switches the global translator to ``lang_code`` and returns it."""
    _.set_language(lang_code)
    return _


# --- Create the global instance that the app will import ---
_ = Translator()
