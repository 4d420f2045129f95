"""Air cargo booking and route discovery backend."""
