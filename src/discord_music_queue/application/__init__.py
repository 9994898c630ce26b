"""
Application Layer

Orchestrates domain objects and infrastructure adapters.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- services/: Media resolution, subscriptions and the subscription registry
"""
