"""
Operations Layer

This package provides the business logic operations that own and mutate the
stored teams. Operations modules handle validation, transactions and change
notification while maintaining clean separation of concerns.

Architecture:
- Database layer: engine, sessions and the Team model
- Operations layer: team store and seed import
- Services layer: query evaluation, live view and reconciliation

Each operations module focuses on a specific domain:
- TeamOperations: record store with serialized mutations and subscriptions
- SeedOperations: one-shot import of the bundled team list
"""
