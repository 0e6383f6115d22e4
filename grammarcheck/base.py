"""
GrammarCheck Base Classes
=========================
Base classes and raw result types for engine adapters.

Every detection engine is wrapped by an EngineAdapter subclass. Each engine
family reports its findings with its own raw issue type; the issue
normalizer maps each of them onto the canonical Issue.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass, field
import threading
import time

from config_logging import AdapterError, get_logger
from .models import CheckOptions, IssueCategory, Severity

__version__ = "1.0.0"


# =============================================================================
# RAW ISSUE TYPES
# =============================================================================

@dataclass(frozen=True)
class PatternMatch:
    """A regex rule hit. Offsets index the analyzed text."""
    engine: str
    offset: int
    length: int
    matched_text: str
    message: str
    replacements: Tuple[str, ...]
    rule_id: str
    category: IssueCategory
    confidence: float
    severity: Severity = Severity.WARNING


@dataclass(frozen=True)
class SpellingCandidate:
    """A spelling suggestion with metadata."""
    term: str
    distance: int
    frequency: int = 0


@dataclass(frozen=True)
class SpellingMatch:
    """A misspelled word from a dictionary or edit-distance engine."""
    engine: str
    start: int
    end: int
    word: str
    candidates: Tuple[SpellingCandidate, ...]
    engine_confidence: float
    rule_id: str = "SPELLING"


@dataclass(frozen=True)
class GrammarMatch:
    """A LanguageTool rule match."""
    engine: str
    offset: int
    error_length: int
    message: str
    replacements: Tuple[str, ...]
    rule_id: str
    lt_category: str
    issue_type: str = ""
    context: str = ""
    sentence: str = ""


@dataclass(frozen=True)
class StyleMatch:
    """A style or readability finding spanning [start, end)."""
    engine: str
    start: int
    end: int
    message: str
    check_name: str
    replacement: str = ""
    style_category: str = "style"
    severity_hint: str = "suggestion"
    confidence: float = 0.6


RawIssue = Union[PatternMatch, SpellingMatch, GrammarMatch, StyleMatch]


@dataclass
class EngineResult:
    """Result of one adapter invocation."""
    engine: str
    issues: List[RawIssue] = field(default_factory=list)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    skipped: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'engine': self.engine,
            'issue_count': len(self.issues),
            'latency_ms': self.latency_ms,
            'success': self.success,
            'error': self.error,
            'skipped': self.skipped,
        }


# =============================================================================
# ADAPTER CONTRACT
# =============================================================================

class EngineAdapter(ABC):
    """
    Abstract base class for detection engine adapters.

    Subclasses implement _initialize() and _analyze_impl(); analyze() wraps
    them with lazy initialization, timing and failure isolation.
    """

    ADAPTER_NAME: str = "adapter"
    ADAPTER_VERSION: str = "1.0.0"
    CATEGORIES: FrozenSet[IssueCategory] = frozenset()

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._initialized = False
        self._init_attempted = False
        self._init_error: Optional[str] = None
        self._init_lock = threading.Lock()
        self._logger = get_logger(f'grammarcheck.adapters.{self.ADAPTER_NAME}')

    @property
    def name(self) -> str:
        return self.ADAPTER_NAME

    @abstractmethod
    def _initialize(self) -> bool:
        """
        Initialize the engine (load dictionaries, start servers, etc.).

        Returns True if initialization succeeded. Called at most once.
        """

    @abstractmethod
    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        """
        Implementation of the analysis.

        Args:
            text: Normalized text to analyze
            options: Per-call options (categories, language)

        Returns:
            List of raw issues with offsets into text
        """

    def is_available(self) -> bool:
        """Initialize on first call and report whether the engine can run."""
        if not self.enabled:
            return False
        if not self._init_attempted:
            with self._init_lock:
                if not self._init_attempted:
                    try:
                        self._initialized = bool(self._initialize())
                    except Exception as e:
                        self._init_error = f"Initialization failed: {e}"
                        self._initialized = False
                    self._init_attempted = True
                    if not self._initialized:
                        self._logger.warning(
                            f"{self.ADAPTER_NAME} unavailable: {self._init_error}",
                            engine=self.ADAPTER_NAME)
        return self._initialized

    @property
    def init_error(self) -> Optional[str]:
        return self._init_error

    def handles(self, categories: Iterable[IssueCategory]) -> bool:
        """True if any requested category can be produced by this engine."""
        return bool(self.CATEGORIES & frozenset(categories))

    def analyze(self, text: str, options: Optional[CheckOptions] = None) -> EngineResult:
        """
        Run the engine on text.

        Never raises: failures are reported through EngineResult.
        """
        start_time = time.perf_counter()
        options = options or CheckOptions()
        result = EngineResult(engine=self.ADAPTER_NAME)

        if not self.enabled:
            result.skipped = 'disabled'
            return result

        if not self.is_available():
            result.success = False
            result.error = self._init_error or "Initialization failed"
        else:
            try:
                result.issues = list(self._analyze_impl(text, options))
            except AdapterError as e:
                result.success = False
                result.error = e.message
            except Exception as e:
                result.success = False
                result.error = f"Analysis failed: {e}"
                self._logger.exception(f"{self.ADAPTER_NAME} raised during analysis",
                                       engine=self.ADAPTER_NAME)

        result.latency_ms = (time.perf_counter() - start_time) * 1000
        return result

    def get_status(self) -> Dict[str, Any]:
        return {
            'name': self.ADAPTER_NAME,
            'version': self.ADAPTER_VERSION,
            'enabled': self.enabled,
            'available': self._initialized,
            'error': self._init_error,
            'categories': sorted(c.value for c in self.CATEGORIES),
        }

    def close(self):
        """Release engine resources."""


class IntegrationBase(ABC):
    """
    Abstract base class for third-party library integrations.

    Wraps external libraries (SymSpell, PyEnchant, LanguageTool, ...).
    """

    INTEGRATION_NAME: str = "Integration"
    INTEGRATION_VERSION: str = "1.0.0"

    def __init__(self):
        self._available = False
        self._error: Optional[str] = None

    @property
    def is_available(self) -> bool:
        """Check if the integration is available and working."""
        return self._available

    @property
    def error(self) -> Optional[str]:
        """Get initialization error if any."""
        return self._error

    @abstractmethod
    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the integration."""
