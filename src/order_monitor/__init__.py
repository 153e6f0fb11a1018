"""Order Monitor: stuck-order detection and alerting."""
