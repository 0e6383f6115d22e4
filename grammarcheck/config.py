"""
GrammarCheck Configuration Module
=================================
Configuration for the checking service and every engine adapter.

Configuration can be set via:
1. Environment variables (GCS_LANGUAGETOOL_ENABLED=false)
2. Config file (grammarcheck.json)
3. Direct calls (config.set('cache.capacity', 500))
4. Per-service option mappings (conservativeMode, debounceMs, ...)

All settings have defaults suitable for offline operation.
"""

import os
import json
import dataclasses
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from dataclasses import dataclass, field

from config_logging import ConfigurationError, get_logger

__version__ = "1.0.0"

# Default configuration path
CONFIG_FILE = Path.cwd() / "grammarcheck.json"

ALL_CATEGORIES = ['spelling', 'grammar', 'punctuation', 'style', 'word_choice', 'idiom']

DEFAULT_ADAPTER_PRIORITY = ['languagetool', 'rules', 'basic_grammar', 'dictionary', 'symspell', 'style']

_logger = get_logger('grammarcheck.config')


@dataclass
class RulesConfig:
    """Pattern rule engine configuration."""
    enabled: bool = True
    skip_rules: list = field(default_factory=list)


@dataclass
class BasicGrammarConfig:
    """Light regex grammar engine configuration."""
    enabled: bool = True
    check_double_negatives: bool = True


@dataclass
class DictionaryConfig:
    """PyEnchant dictionary engine configuration."""
    enabled: bool = True
    language: str = "en_US"
    personal_dictionary: Optional[str] = None
    max_suggestions: int = 5


@dataclass
class SymSpellConfig:
    """SymSpell edit-distance engine configuration."""
    enabled: bool = True
    max_edit_distance: int = 2
    prefix_length: int = 7
    custom_dictionary: Optional[str] = None


@dataclass
class LanguageToolConfig:
    """LanguageTool configuration."""
    enabled: bool = True
    language: str = "en-US"
    remote_server: Optional[str] = None  # e.g. http://localhost:8081
    disabled_rules: list = field(default_factory=lambda: [
        "WHITESPACE_RULE",
        "COMMA_PARENTHESIS_WHITESPACE",
    ])
    cache_size: int = 1000


@dataclass
class StyleConfig:
    """Style engine configuration."""
    enabled: bool = True
    use_proselint: bool = True
    skip_checks: list = field(default_factory=lambda: [
        "typography.symbols",
    ])
    check_passive_voice: bool = True
    max_sentence_words: int = 35


@dataclass
class OrchestratorConfig:
    """Adapter fan-out, timeouts and failover."""
    adapter_timeout_ms: int = 3000
    engine_timeouts_ms: dict = field(default_factory=lambda: {
        'languagetool': 10000,
        'dictionary': 5000,
        'symspell': 5000,
    })
    global_timeout_ms: int = 15000
    enable_failover: bool = True
    fallbacks: dict = field(default_factory=lambda: {
        'languagetool': 'basic_grammar',
    })
    adapter_priority: list = field(default_factory=lambda: list(DEFAULT_ADAPTER_PRIORITY))
    max_workers: int = 6


@dataclass
class CacheConfig:
    """Two-level result cache configuration."""
    enabled: bool = True
    capacity: int = 2000
    ttl_ms: int = 300000  # 5 minutes
    eviction_fraction: float = 0.2
    similarity_threshold: float = 0.8
    near_duplicate_scan: int = 50
    word_delta_tolerance: int = 2
    length_tolerance: float = 0.1


@dataclass
class ClassifierConfig:
    """Suggestion safety classifier thresholds."""
    conservative_mode: bool = True
    conservative_auto_threshold: float = 0.85
    conservative_semi_threshold: float = 0.65
    relaxed_auto_threshold: float = 0.75
    relaxed_semi_threshold: float = 0.55
    pattern_min_safety: float = 0.8
    pattern_max_complexity: float = 0.3
    manual_min_length: int = 50

    @property
    def auto_threshold(self) -> float:
        if self.conservative_mode:
            return self.conservative_auto_threshold
        return self.relaxed_auto_threshold

    @property
    def semi_threshold(self) -> float:
        if self.conservative_mode:
            return self.conservative_semi_threshold
        return self.relaxed_semi_threshold


@dataclass
class SchedulerConfig:
    """Debounce and concurrency configuration."""
    debounce_ms: int = 1000
    max_concurrent_checks: int = 5
    min_text_length: int = 3      # check_text short-circuit
    min_content_length: int = 10  # on_content_changed short-circuit
    min_change_chars: int = 10


@dataclass
class ServiceConfig:
    """Master service configuration."""
    categories: list = field(default_factory=lambda: list(ALL_CATEGORIES))
    language: str = "en-US"
    context_radius: int = 30
    max_suggestions: int = 5
    rules: RulesConfig = field(default_factory=RulesConfig)
    basic_grammar: BasicGrammarConfig = field(default_factory=BasicGrammarConfig)
    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)
    symspell: SymSpellConfig = field(default_factory=SymSpellConfig)
    languagetool: LanguageToolConfig = field(default_factory=LanguageToolConfig)
    style: StyleConfig = field(default_factory=StyleConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    # Option names accepted by apply_options, camelCase or snake_case
    OPTION_KEYS = {
        'categories': 'categories',
        'language': 'language',
        'conservativeMode': 'classifier.conservative_mode',
        'conservative_mode': 'classifier.conservative_mode',
        'maxConcurrentChecks': 'scheduler.max_concurrent_checks',
        'max_concurrent_checks': 'scheduler.max_concurrent_checks',
        'debounceMs': 'scheduler.debounce_ms',
        'debounce_ms': 'scheduler.debounce_ms',
        'cacheTtlMs': 'cache.ttl_ms',
        'cache_ttl_ms': 'cache.ttl_ms',
        'cacheCapacity': 'cache.capacity',
        'cache_capacity': 'cache.capacity',
    }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Example: config.get('cache.capacity') -> 2000
        """
        obj = self
        for part in key.split('.'):
            if dataclasses.is_dataclass(obj) and hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj

    def set(self, key: str, value: Any):
        """
        Set a configuration value by dot-notation key.

        Example: config.set('languagetool.enabled', False)
        """
        parts = key.split('.')
        if len(parts) == 1:
            if parts[0] not in ('categories', 'language', 'context_radius', 'max_suggestions'):
                raise ConfigurationError(f"Unknown config key: {key}", key=key)
            if parts[0] == 'categories':
                value = _parse_categories(value)
            setattr(self, parts[0], value)
            return

        if len(parts) != 2:
            raise ConfigurationError(f"Key must be in format 'section.key': {key}", key=key)

        section_name, attr_name = parts
        section = getattr(self, section_name, None)
        if not dataclasses.is_dataclass(section):
            raise ConfigurationError(f"Unknown config section: {section_name}", key=key)
        if not any(f.name == attr_name for f in dataclasses.fields(section)):
            raise ConfigurationError(f"Unknown config key: {attr_name}", key=key)
        setattr(section, attr_name, value)

    def apply_options(self, options: Optional[Mapping[str, Any]]) -> 'ServiceConfig':
        """Apply a recognized service option mapping in place."""
        for name, value in (options or {}).items():
            if name not in self.OPTION_KEYS:
                raise ConfigurationError(f"Unknown option: {name}", key=name)
            self.set(self.OPTION_KEYS[name], value)
        return self

    def section_enabled(self, name: str) -> bool:
        section = getattr(self, name, None)
        return bool(getattr(section, 'enabled', False))

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def _parse_categories(value: Any) -> List[str]:
    if isinstance(value, str):
        value = _parse_list(value)
    categories = [str(getattr(v, 'value', v)) for v in value]
    unknown = [c for c in categories if c not in ALL_CATEGORIES]
    if unknown:
        raise ConfigurationError(f"Unknown categories: {', '.join(unknown)}", key='categories')
    return categories


def load_config(path: Optional[Path] = None,
                options: Optional[Mapping[str, Any]] = None) -> ServiceConfig:
    """Load configuration from file, environment and an option mapping."""
    config = ServiceConfig()
    path = Path(path) if path else CONFIG_FILE

    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
            _apply_dict_to_config(config, file_config)
        except (json.JSONDecodeError, IOError) as e:
            _logger.warning(f"Could not load config file: {e}", path=str(path))

    _apply_env_to_config(config)

    if options:
        config.apply_options(options)

    return config


def _apply_dict_to_config(config: ServiceConfig, data: Dict[str, Any]):
    """Apply dictionary values to config object."""
    for section_name, section_data in data.items():
        if not hasattr(config, section_name):
            continue
        if isinstance(section_data, dict):
            section = getattr(config, section_name)
            if not dataclasses.is_dataclass(section):
                continue
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)
        else:
            config.set(section_name, section_data)


def _apply_env_to_config(config: ServiceConfig):
    """Apply environment variables to config."""
    env_mappings = {
        'GCS_CATEGORIES': ('categories', _parse_categories),
        'GCS_LANGUAGE': ('language', str),
        'GCS_RULES_ENABLED': ('rules.enabled', _parse_bool),
        'GCS_BASIC_GRAMMAR_ENABLED': ('basic_grammar.enabled', _parse_bool),
        'GCS_DICTIONARY_ENABLED': ('dictionary.enabled', _parse_bool),
        'GCS_DICTIONARY_PERSONAL': ('dictionary.personal_dictionary', str),
        'GCS_SYMSPELL_ENABLED': ('symspell.enabled', _parse_bool),
        'GCS_SYMSPELL_MAX_EDIT_DISTANCE': ('symspell.max_edit_distance', int),
        'GCS_LANGUAGETOOL_ENABLED': ('languagetool.enabled', _parse_bool),
        'GCS_LANGUAGETOOL_LANGUAGE': ('languagetool.language', str),
        'GCS_LANGUAGETOOL_SERVER': ('languagetool.remote_server', str),
        'GCS_STYLE_ENABLED': ('style.enabled', _parse_bool),
        'GCS_STYLE_PROSELINT': ('style.use_proselint', _parse_bool),
        'GCS_ADAPTER_TIMEOUT_MS': ('orchestrator.adapter_timeout_ms', int),
        'GCS_GLOBAL_TIMEOUT_MS': ('orchestrator.global_timeout_ms', int),
        'GCS_FAILOVER': ('orchestrator.enable_failover', _parse_bool),
        'GCS_CACHE_ENABLED': ('cache.enabled', _parse_bool),
        'GCS_CACHE_CAPACITY': ('cache.capacity', int),
        'GCS_CACHE_TTL_MS': ('cache.ttl_ms', int),
        'GCS_CONSERVATIVE_MODE': ('classifier.conservative_mode', _parse_bool),
        'GCS_DEBOUNCE_MS': ('scheduler.debounce_ms', int),
        'GCS_MAX_CONCURRENT_CHECKS': ('scheduler.max_concurrent_checks', int),
    }

    for env_var, (key, converter) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                config.set(key, converter(value))
            except (ValueError, ConfigurationError) as e:
                _logger.warning(f"Invalid env var {env_var}={value}: {e}", env_var=env_var)


def save_config(config: ServiceConfig, path: Optional[Path] = None):
    """Save configuration to a JSON file."""
    path = Path(path) if path else CONFIG_FILE
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)


def disable_all_engines(config: ServiceConfig) -> ServiceConfig:
    """Disable every engine adapter (useful for testing)."""
    for name in ('rules', 'basic_grammar', 'dictionary', 'symspell', 'languagetool', 'style'):
        getattr(config, name).enabled = False
    return config
