"""
Error handling - rule rejections raised to callers and the central reporter
for invariant violations detected while resolving effects.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class GameRuleError(Exception):
    """Base class for rejected player intents. Raised before any mutation."""
    reason = 'invalid_action'

    def __init__(self, reason: Optional[str] = None, message: Optional[str] = None):
        if reason is not None:
            self.reason = reason
        super().__init__(message or self.reason)


class InvalidPlacement(GameRuleError):
    reason = 'invalid_placement'


class InvalidAttack(GameRuleError):
    reason = 'invalid_attack'


class InsufficientGold(GameRuleError):
    reason = 'insufficient_gold'


class HandFull(GameRuleError):
    reason = 'hand_full'


class EmptyDeck(GameRuleError):
    reason = 'empty_deck'


class NoDraftActive(GameRuleError):
    reason = 'no_draft_active'


class NoCardsAvailable(GameRuleError):
    reason = 'no_cards_available'


class InvariantViolation(Exception):
    """A mutation found the state in a shape it cannot act on"""
    pass


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_LOG_LEVELS = {
    Severity.CRITICAL: logging.CRITICAL,
    Severity.HIGH: logging.ERROR,
    Severity.MEDIUM: logging.WARNING,
    Severity.LOW: logging.DEBUG,
}


@dataclass
class ErrorReport:
    """One handled error"""
    message: str
    error_type: str
    operation: str
    component: str
    severity: Severity
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'error_type': self.error_type,
            'operation': self.operation,
            'component': self.component,
            'severity': self.severity.value,
            'context': dict(self.context),
        }


class ErrorHandler:
    """Central reporter for errors caught at the point of mutation.

    Critical errors are logged and re-raised. Everything else is logged at a
    level matching its severity, recorded in ``history`` and forwarded to
    observers as a ``system_error`` event so the caller can skip the
    offending mutation and keep the turn going.
    """

    def __init__(self, event_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None,
                 max_history: int = 100):
        self.event_callback = event_callback
        self.max_history = max_history
        self.history: List[ErrorReport] = []

    def handle(self, error: Exception, context: Optional[Dict[str, Any]] = None,
               operation: str = 'unknown', component: str = 'unknown',
               severity: Severity = Severity.MEDIUM) -> ErrorReport:
        if isinstance(severity, str):
            severity = Severity(severity)

        report = ErrorReport(
            message=str(error),
            error_type=type(error).__name__,
            operation=operation,
            component=component,
            severity=severity,
            context=dict(context or {}),
        )
        self.history.append(report)
        if len(self.history) > self.max_history:
            self.history = self.history[-self.max_history:]

        logger.log(_LOG_LEVELS[severity], "[%s] %s.%s: %s %s",
                   severity.value.upper(), component, operation, report.message, report.context or '')

        if self.event_callback:
            self.event_callback('system_error', report.to_dict())

        if severity == Severity.CRITICAL:
            raise error
        return report

    def clear(self) -> None:
        self.history = []
