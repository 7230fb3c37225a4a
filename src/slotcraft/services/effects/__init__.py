"""
Effect Handlers - Registry and base classes for ability effects
"""
import logging
from typing import Dict, Any, List, Optional, TYPE_CHECKING
from abc import ABC, abstractmethod
from slotcraft.models.effect import Effect, EffectType, TriggerContext

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)


class EffectHandler(ABC):
    """Base class for effect handlers"""

    @abstractmethod
    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        """
        Execute the effect

        Args:
            effect: The effect to execute
            context: Trigger context (owner, source slot, source unit)
            engine: Rules engine giving access to the state store

        Returns:
            List of result records describing what changed
        """
        pass


# Registry of effect handlers
_effect_handlers: Dict[EffectType, EffectHandler] = {}


def register_effect_handler(effect_type: EffectType, handler: EffectHandler):
    """Register an effect handler"""
    _effect_handlers[effect_type] = handler


def get_effect_handler(effect_type: EffectType) -> Optional[EffectHandler]:
    """Get handler for effect type"""
    return _effect_handlers.get(effect_type)


def get_registered_effect_types() -> List[EffectType]:
    """Get list of registered effect types"""
    return list(_effect_handlers.keys())


def execute_effect(effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
    handler = get_effect_handler(effect.type)
    if handler is None:
        logger.warning(f"No handler registered for effect type {effect.type}")
        return []
    return handler.execute(effect, context, engine)


# Import handlers to register them
from . import damage  # noqa: E402
from . import buff  # noqa: E402
from . import grant  # noqa: E402
from . import summon  # noqa: E402
from . import draw  # noqa: E402
from . import heal  # noqa: E402
from . import resources  # noqa: E402
