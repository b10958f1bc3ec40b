"""
Services package for the World Cup team board.

Live view pipeline: query evaluation, snapshot reconciliation and the live
view controller.
"""

from .live_view import LiveViewController, ViewState
from .reconciler import apply_operations, diff

__all__ = ['LiveViewController', 'ViewState', 'apply_operations', 'diff']
