"""
Cloning utilities for CashflowLab documents.

Projections and what-if operations work on private deep copies so that the
caller's document is never mutated and runs never share state.
"""

from __future__ import annotations

from copy import deepcopy


def clone_document(document):
    """
    Return a deep, run-local copy of a base document or sandbox.

    Args:
        document: ``BaseDocument`` or ``Sandbox`` to copy

    Returns:
        A deep copy sharing no mutable state with ``document``
    """
    return deepcopy(document)
