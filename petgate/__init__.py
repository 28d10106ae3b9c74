"""Contract-validating HTTP gateway for the pet store example API."""
