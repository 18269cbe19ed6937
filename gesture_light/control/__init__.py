"""Light actuator and command dispatch."""
from .command_dispatcher import CommandDispatcher, LightActuator
from .govee_client import GoveeClient, GoveeConfig, GoveeDevice

__all__ = ["CommandDispatcher", "LightActuator", "GoveeClient", "GoveeConfig", "GoveeDevice"]
