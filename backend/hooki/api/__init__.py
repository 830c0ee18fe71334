"""HTTP routers for the Hooki API."""
