"""Startup wiring and application factory (see `wiring`)."""
