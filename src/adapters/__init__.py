"""Adapters binding the core to Bluesky (AT Protocol) and outbound HTTP."""
