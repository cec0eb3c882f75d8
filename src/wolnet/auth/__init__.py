"""Request authentication and signed cookies."""
