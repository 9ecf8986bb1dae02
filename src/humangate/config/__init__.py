"""Configuration for humangate: ``defaults`` for constants, ``settings`` for GateConfig."""
