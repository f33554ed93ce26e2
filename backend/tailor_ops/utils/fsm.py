from __future__ import annotations
"""Small finite state machine helper for enforcing allowed status transitions.

Used for section dyeing states and the order dispatch lifecycle.
Usage:
    from tailor_ops.utils.fsm import TransitionValidator
    DISPATCH_FSM = TransitionValidator({
        'READY_FOR_DISPATCH': {'DISPATCHED'},
        'DISPATCHED': {'COMPLETED'},
        'COMPLETED': set(),
    })
    DISPATCH_FSM.assert_can_transition(order.status, 'DISPATCHED')

Raises InvalidTransition (400) if the edge is not in the graph.
"""
from typing import Dict, Set, Optional
from tailor_ops.errors import InvalidTransition


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: Optional[str], target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: Optional[str], target: str, description: Optional[str] = None):
        if not self.can_transition(current, target):
            raise InvalidTransition(
                description or f"Invalid {self.field_name} transition {current} -> {target}",
                current=current,
                target=target,
            )
        return True

    def terminal_states(self) -> Set[str]:
        return {state for state, targets in self.graph.items() if not targets}


__all__ = ['TransitionValidator']
