"""Events API requests: url_verification and event_callback envelopes."""
