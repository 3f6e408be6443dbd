"""HTTP service exposing the user account and session API."""
