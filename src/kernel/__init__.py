"""
Stable Kernel Layer

Foundational pieces every engine component builds on:
- Identifier and temporal primitives (GUIDs, UTC timestamps)
- Activity vocabularies and taxonomy
- Value models for entity state and activity records

Architectural invariants:
- Activity records are append-only and never mutated
- "Now" is always supplied by the caller; nothing here reads the clock
"""
