"""
Layers package initialization.

Modules are imported directly (e.g. product_scout.layers.coordinator);
nothing is re-exported here so the adapters and layers can import each other.
"""
