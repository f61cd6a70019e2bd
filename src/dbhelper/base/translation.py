from typing import Dict, Mapping, Optional


class Translator:
    """Returns texts untranslated."""

    def translate(self, text: str) -> str:
        return text


class DictTranslator(Translator):
    """
    Looks texts up in a plain mapping, falling back to the source text.

    Example:
        DictTranslator({"AND": "UND", "OR": "ODER", "NOT": "NICHT"})
    """

    def __init__(self, texts: Optional[Mapping[str, str]] = None):
        self._texts: Dict[str, str] = dict(texts or {})

    def translate(self, text: str) -> str:
        return self._texts.get(text, text)


GERMAN_CONNECTORS = {"AND": "UND", "OR": "ODER", "NOT": "NICHT"}
