"""Core domain: events, context, formatting, rotation policy and routing."""
