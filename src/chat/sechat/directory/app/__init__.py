"""Process wiring: settings, logging, metrics and the runtime context."""
