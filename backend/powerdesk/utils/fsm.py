from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed state transitions.

Designed for lightweight lifecycles such as the invoice editor's submission state.
Usage:
    from powerdesk.utils.fsm import TransitionValidator
    SUBMIT_FSM = TransitionValidator({
        'idle': {'submitting'},
        'submitting': {'idle'},
    }, field_name='submission')
    SUBMIT_FSM.assert_can_transition(current_state, target_state)

Raises InvalidTransition if the move is not in the graph.
"""
from typing import Dict, Set


class InvalidTransition(Exception):
    pass


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidTransition(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

__all__ = ['TransitionValidator', 'InvalidTransition']
