"""HTTP and WebSocket front end for a running session."""
