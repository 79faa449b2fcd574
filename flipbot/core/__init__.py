"""Core application plumbing: dependencies and response envelopes."""
