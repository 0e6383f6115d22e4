"""
Adapter Registry
================
Builds engine adapters from configuration.

Adapter classes are imported only when their engine is enabled, so a
missing optional library never prevents the service from starting; the
adapter reports itself unavailable instead.
"""

from typing import Callable, Dict, Iterable, List, Optional

from config_logging import get_logger
from .base import EngineAdapter
from .config import ServiceConfig

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.registry')


def _rules(config: ServiceConfig) -> EngineAdapter:
    from .rules.checker import PatternRuleAdapter
    return PatternRuleAdapter(skip_rules=config.rules.skip_rules)


def _basic_grammar(config: ServiceConfig) -> EngineAdapter:
    from .rules.checker import BasicGrammarAdapter
    return BasicGrammarAdapter(check_double_negatives=config.basic_grammar.check_double_negatives)


def _dictionary(config: ServiceConfig) -> EngineAdapter:
    from .spelling.checker import DictionarySpellingAdapter
    section = config.dictionary
    return DictionarySpellingAdapter(
        language=section.language,
        personal_dictionary=section.personal_dictionary,
        max_suggestions=section.max_suggestions,
    )


def _symspell(config: ServiceConfig) -> EngineAdapter:
    from .spelling.checker import SymSpellAdapter
    section = config.symspell
    return SymSpellAdapter(
        max_edit_distance=section.max_edit_distance,
        prefix_length=section.prefix_length,
        custom_dictionary=section.custom_dictionary,
    )


def _languagetool(config: ServiceConfig) -> EngineAdapter:
    from .languagetool.checker import LanguageToolAdapter
    section = config.languagetool
    return LanguageToolAdapter(
        language=section.language,
        remote_server=section.remote_server,
        disabled_rules=section.disabled_rules,
        cache_size=section.cache_size,
    )


def _style(config: ServiceConfig) -> EngineAdapter:
    from .style.checker import StyleAdapter
    section = config.style
    return StyleAdapter(
        use_proselint=section.use_proselint,
        skip_checks=section.skip_checks,
        check_passive_voice=section.check_passive_voice,
        max_sentence_words=section.max_sentence_words,
    )


ADAPTER_FACTORIES: Dict[str, Callable[[ServiceConfig], EngineAdapter]] = {
    'rules': _rules,
    'basic_grammar': _basic_grammar,
    'dictionary': _dictionary,
    'symspell': _symspell,
    'languagetool': _languagetool,
    'style': _style,
}


def build_adapters(config: ServiceConfig,
                   names: Optional[Iterable[str]] = None) -> List[EngineAdapter]:
    """
    Create the adapters enabled in config.

    Args:
        config: Service configuration
        names: Restrict to these engine names (default: all registered)

    Returns:
        Adapters in registry order. Disabled engines are omitted.
    """
    adapters = []
    for name in (names or ADAPTER_FACTORIES):
        factory = ADAPTER_FACTORIES.get(name)
        if factory is None:
            _logger.warning(f"Unknown engine: {name}", engine=name)
            continue
        if not config.section_enabled(name):
            _logger.debug(f"Engine disabled by configuration: {name}", engine=name)
            continue
        adapters.append(factory(config))
    return adapters
