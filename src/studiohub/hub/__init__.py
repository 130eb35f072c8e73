# Studio Hub Core
# SPDX-License-Identifier: Apache-2.0

from studiohub.hub.broadcaster import EventBroadcaster
from studiohub.hub.correlator import ResultCorrelator
from studiohub.hub.dispatcher import CommandDispatcher
from studiohub.hub.exceptions import AgentNotFoundError, HubError, HubValidationError
from studiohub.hub.liveness import LivenessMonitor
from studiohub.hub.manager import HubManager, get_hub_manager, init_hub_manager, reset_hub_manager
from studiohub.hub.models import Agent, AgentIdentity, Event, LogEntry, PendingCommand
from studiohub.hub.registry import AgentRegistry

__all__ = [
    'Agent',
    'AgentIdentity',
    'AgentNotFoundError',
    'AgentRegistry',
    'CommandDispatcher',
    'Event',
    'EventBroadcaster',
    'HubError',
    'HubManager',
    'HubValidationError',
    'LivenessMonitor',
    'LogEntry',
    'PendingCommand',
    'ResultCorrelator',
    'get_hub_manager',
    'init_hub_manager',
    'reset_hub_manager',
]
