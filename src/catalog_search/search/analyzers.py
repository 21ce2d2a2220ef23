"""Analyzer and token-filter configuration for the catalog index.

The engine does the actual text processing; this module only derives the
named, composable definitions referenced by field mappings. Base analyzers
are always present. A stemming analyzer is added per store language when the
language has a stemmer; ICU folding, when enabled, becomes the first filter
of every analyzer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from dataclasses import dataclass, field
import logging
from typing import Any

from catalog_search.domain.catalog import Store
from catalog_search.search.naming import language_analyzer_name, snowball_filter_name


logger = logging.getLogger(__name__)

ICU_FOLDING_FILTER = "icu_folding"
FALLBACK_ANALYZER = "whitespace"

# Languages with a snowball stemmer shipped by the engine.
STEMMER_LANGUAGES = frozenset(
    {
        "Armenian",
        "Basque",
        "Catalan",
        "Danish",
        "Dutch",
        "English",
        "Finnish",
        "French",
        "German",
        "Hungarian",
        "Italian",
        "Norwegian",
        "Portuguese",
        "Romanian",
        "Russian",
        "Spanish",
        "Swedish",
        "Turkish",
    }
)

# ISO 639-1 code -> English language name.
LANGUAGE_NAMES: dict[str, str] = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "ca": "Catalan",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "es": "Spanish",
    "eu": "Basque",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "gl": "Galician",
    "he": "Hebrew",
    "hi": "Hindi",
    "hu": "Hungarian",
    "hy": "Armenian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nb": "Norwegian Bokmål",
    "nl": "Dutch",
    "nn": "Norwegian Nynorsk",
    "no": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "zh": "Chinese",
}

_BASE_ANALYZERS: dict[str, dict[str, Any]] = {
    "whitespace": {"tokenizer": "standard", "filter": ["lowercase"]},
    "edge_ngram_front": {"tokenizer": "standard", "filter": ["length", "edge_ngram_front", "lowercase"]},
    "edge_ngram_back": {"tokenizer": "standard", "filter": ["length", "edge_ngram_back", "lowercase"]},
    "shingle": {"tokenizer": "standard", "filter": ["shingle", "length", "lowercase"]},
    "shingle_strip_ws": {
        "tokenizer": "standard",
        "filter": ["shingle", "strip_whitespaces", "length", "lowercase"],
    },
    "shingle_strip_apos_and_ws": {
        "tokenizer": "standard",
        "filter": ["shingle", "strip_apostrophes", "strip_whitespaces", "length", "lowercase"],
    },
}

_BASE_FILTERS: dict[str, dict[str, Any]] = {
    "shingle": {"type": "shingle", "max_shingle_size": 20, "output_unigrams": True},
    "strip_whitespaces": {"type": "pattern_replace", "pattern": r"\s", "replacement": ""},
    "strip_apostrophes": {"type": "pattern_replace", "pattern": "'", "replacement": ""},
    "edge_ngram_front": {"type": "edgeNGram", "min_gram": 3, "max_gram": 10, "side": "front"},
    "edge_ngram_back": {"type": "edgeNGram", "min_gram": 3, "max_gram": 10, "side": "back"},
    "length": {"type": "length", "min": 2},
}


def resolve_language_name(language_code: str) -> str | None:
    """Return the English name of an ISO 639-1 language code, if known."""
    return LANGUAGE_NAMES.get(language_code.lower())


@dataclass
class AnalysisSettings:
    """Named analyzers and filters, serialized under ``settings.analysis``."""

    analyzers: dict[str, dict[str, Any]] = field(default_factory=dict)
    filters: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def analyzer_names(self) -> list[str]:
        return list(self.analyzers)

    def has_analyzer(self, name: str) -> bool:
        return name in self.analyzers

    def analyzer_for_language(self, language_code: str) -> str:
        """Language analyzer for a store, or the base fallback when none exists."""
        name = language_analyzer_name(language_code)
        return name if name in self.analyzers else FALLBACK_ANALYZER

    def to_dict(self) -> dict[str, Any]:
        return {"analyzer": copy.deepcopy(self.analyzers), "filter": copy.deepcopy(self.filters)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalysisSettings:
        return cls(
            analyzers=copy.deepcopy(dict(data.get("analyzer", {}))),
            filters=copy.deepcopy(dict(data.get("filter", {}))),
        )


class AnalyzerConfigBuilder:
    """Derives the analyzer/filter graph from the store languages."""

    def __init__(
        self,
        *,
        stemmer_languages: Iterable[str] = STEMMER_LANGUAGES,
        language_names: Mapping[str, str] | None = None,
    ) -> None:
        self.stemmer_languages = frozenset(stemmer_languages)
        self.language_names = dict(LANGUAGE_NAMES if language_names is None else language_names)

    def build_analysis(self, stores: Iterable[Store], icu_enabled: bool = False) -> AnalysisSettings:
        """Return base analyzers plus one stemming analyzer per supported store language."""
        analysis = AnalysisSettings(
            analyzers=copy.deepcopy(_BASE_ANALYZERS),
            filters=copy.deepcopy(_BASE_FILTERS),
        )

        seen: set[str] = set()
        for store in stores:
            language_code = store.language_code
            if language_code in seen:
                continue
            seen.add(language_code)

            language = self.language_names.get(language_code)
            if language not in self.stemmer_languages:
                logger.debug(
                    "No stemmer for store %s (language %s); using base analyzers",
                    store.code,
                    language or language_code,
                )
                continue

            stemmer = snowball_filter_name(language_code)
            analysis.analyzers[language_analyzer_name(language_code)] = {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["length", "lowercase", stemmer],
            }
            analysis.filters[stemmer] = {"type": "snowball", "language": language}

        if icu_enabled:
            for definition in analysis.analyzers.values():
                definition["filter"].insert(0, ICU_FOLDING_FILTER)

        return analysis
