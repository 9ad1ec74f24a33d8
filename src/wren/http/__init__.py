"""HTTP primitives — request, response sink, headers, and envelopes."""
