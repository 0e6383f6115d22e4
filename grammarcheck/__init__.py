"""
GrammarCheck Multi-Engine Checking Core
=======================================
Version: 1.0.0

Runs several independent detection engines over free-form text and merges
their output into one de-duplicated, confidence-ranked list of issues,
each suggestion carrying a safety classification:
- rules / basic_grammar: offline regex engines
- dictionary: PyEnchant spelling with inflection awareness
- symspell: fast edit-distance suggestions
- languagetool: comprehensive grammar checking (3000+ rules)
- style: passive voice, wordiness, long sentences, Proselint

Engine packages load lazily - they only import when accessed.
"""

__version__ = "1.0.0"
__author__ = "GrammarCheck"

from .models import (  # noqa: E402
    ALL_CATEGORIES,
    CheckOptions,
    CheckResult,
    CheckStatistics,
    Classification,
    EngineHealthRecord,
    HealthReport,
    Issue,
    IssueCategory,
    Severity,
    Suggestion,
)

_MODULES = {
    'rules': 'grammarcheck.rules',
    'spelling': 'grammarcheck.spelling',
    'languagetool': 'grammarcheck.languagetool',
    'style': 'grammarcheck.style',
}

_loaded_modules = {}


def __getattr__(name):
    """Lazy load engine packages and the service on first access."""
    if name in _MODULES:
        if name not in _loaded_modules:
            import importlib
            _loaded_modules[name] = importlib.import_module(_MODULES[name])
        return _loaded_modules[name]
    if name in ('GrammarCheckingService', 'EditorBridge'):
        from . import service
        return getattr(service, name)
    if name in ('CheckObserver', 'SchedulerState'):
        from . import scheduler
        return getattr(scheduler, name)
    raise AttributeError(f"module 'grammarcheck' has no attribute '{name}'")


def __dir__():
    return list(_MODULES.keys()) + [
        'GrammarCheckingService', 'EditorBridge', 'CheckObserver', 'SchedulerState',
        'get_status', 'CheckOptions', 'CheckResult', 'Issue', 'Suggestion',
    ]


def get_status():
    """
    Get status of every engine package.

    Returns dict with import availability and version info per engine
    package. Does not start any engine.
    """
    status = {
        'version': __version__,
        'modules': {}
    }

    for name in _MODULES:
        module_status = {'available': False, 'version': None, 'error': None}
        try:
            mod = __getattr__(name)
            module_status['available'] = mod.is_available()
            module_status['version'] = getattr(mod, '__version__', 'unknown')
        except ImportError as e:
            module_status['error'] = str(e)
        status['modules'][name] = module_status

    return status
