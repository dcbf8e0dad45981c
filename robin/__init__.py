"""
Robin Accountant
================

Dialogue engine for a conversational expense-tracking assistant.

This package provides:
- NLU result normalization into per-turn facts
- The conversation state machine and expense draft protocol
- Message templating
- Adapters and a turn orchestrator for the surrounding services
"""

__version__ = "1.0.0"
