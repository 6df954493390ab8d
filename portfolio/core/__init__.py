"""Core application wiring: settings, lifespan, exception handlers, rate limiting."""
